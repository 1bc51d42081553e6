# -*- coding: utf-8 -*-
"""
Ayanāṁśa — precession correction between the tropical and sidereal zodiacs.

Two interchangeable strategies share one interface (``name`` +
``correction(instant)`` in degrees):

- ``AccumulatedPrecession``: value at J2000 plus the IAU 2006 general
  precession in longitude p_A, evaluated by ERFA (``erfa.p06e``).
- ``LinearPrecession``: value at J2000 plus a constant 50.290966″/year.

Both start from the same J2000 value, so they agree exactly at the epoch and
drift apart by a few arcseconds per century (p_A carries a 1.105″·T² term).
``NoPrecession`` returns 0 and gives tropical longitudes.

Presets shift the J2000 value: Lahiri (Chitrapaksha) is the default,
Fagan/Bradley sits 0°0.83′ above it, Krishnamurti 20″ below.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple
import math

import erfa  # pyERFA exposes the ERFA namespace as 'erfa'

from astrocore.core.constants import JULIAN_YEAR_D, J2000
from astrocore.core.errors import InvalidInputError
from astrocore.core.types import AngularPosition, Instant

__all__ = [
    "AyanamsaStrategy",
    "AccumulatedPrecession",
    "LinearPrecession",
    "NoPrecession",
    "PRESETS_J2000_DEG",
    "DEFAULT_STRATEGY",
    "get_strategy",
    "precession_correction",
    "precession_between",
    "tropical_to_sidereal",
]

LAHIRI_J2000_DEG = 23.0 + 51.0 / 60.0 + 26.26 / 3600.0   # ≈ 23.857294°
RATE_ARCSEC_PER_YEAR = 50.290966

PRESETS_J2000_DEG: Dict[str, float] = {
    "lahiri": LAHIRI_J2000_DEG,
    "fagan_bradley": LAHIRI_J2000_DEG + 0.83 / 60.0,
    "krishnamurti": LAHIRI_J2000_DEG - 20.0 / 3600.0,
}

_PRESET_ALIASES: Dict[str, str] = {
    "lahiri": "lahiri",
    "chitrapaksha": "lahiri",
    "default": "lahiri",
    "sidereal": "lahiri",
    "fagan_bradley": "fagan_bradley",
    "fagan/bradley": "fagan_bradley",
    "fagan": "fagan_bradley",
    "krishnamurti": "krishnamurti",
    "kp": "krishnamurti",
}
_TROPICAL_NAMES = ("tropical", "none")
_PRECISION_ALIASES: Dict[str, str] = {
    "accumulated": "accumulated",
    "high": "accumulated",
    "iau2006": "accumulated",
    "linear": "linear",
    "simple": "linear",
}


def _split_jd(jd: float) -> Tuple[float, float]:
    """
    Split a JD into ERFA two-part form as (integer_day, fractional_day).

    This preserves precision vs. passing (jd, 0.0).
    """
    d1 = math.floor(jd)
    d2 = jd - d1
    if d2 >= 1.0:
        d1 += 1.0
        d2 -= 1.0
    return float(d1), float(d2)


# ───────────────────────────── Strategies ─────────────────────────────
class AyanamsaStrategy:
    """Interface: a named, pure function instant → correction in degrees."""

    @property
    def name(self) -> str:
        raise NotImplementedError

    def correction(self, instant: float) -> float:
        raise NotImplementedError


@dataclass(frozen=True)
class AccumulatedPrecession(AyanamsaStrategy):
    preset: str = "lahiri"
    base_deg: float = LAHIRI_J2000_DEG

    @property
    def name(self) -> str:
        return f"{self.preset}/accumulated"

    def correction(self, instant: float) -> float:
        d1, d2 = _split_jd(float(Instant(instant)))
        # p06e → (eps0, psia, oma, bpa, bqa, pia, bpia, epsa, chia, za, zetaa, thetaa, pa, gam, phi, psi)
        pa_rad = erfa.p06e(d1, d2)[12]
        return self.base_deg + math.degrees(float(pa_rad))


@dataclass(frozen=True)
class LinearPrecession(AyanamsaStrategy):
    preset: str = "lahiri"
    base_deg: float = LAHIRI_J2000_DEG
    rate_arcsec_per_year: float = RATE_ARCSEC_PER_YEAR

    @property
    def name(self) -> str:
        return f"{self.preset}/linear"

    def correction(self, instant: float) -> float:
        years = (float(Instant(instant)) - J2000) / JULIAN_YEAR_D
        return self.base_deg + self.rate_arcsec_per_year * years / 3600.0


@dataclass(frozen=True)
class NoPrecession(AyanamsaStrategy):
    @property
    def name(self) -> str:
        return "tropical"

    def correction(self, instant: float) -> float:
        Instant(instant)
        return 0.0


DEFAULT_STRATEGY: AyanamsaStrategy = AccumulatedPrecession()


def get_strategy(name: str = "lahiri", precision: str = "accumulated") -> AyanamsaStrategy:
    """Resolve a preset name (+ precision) to a strategy; unknown names fail fast."""
    key = str(name or "lahiri").strip().lower()
    if key in _TROPICAL_NAMES:
        return NoPrecession()

    preset = _PRESET_ALIASES.get(key)
    if preset is None:
        allowed = ", ".join(sorted(set(_PRESET_ALIASES) | set(_TROPICAL_NAMES)))
        raise InvalidInputError(f"unknown ayanamsa '{name}' (allowed: {allowed})")

    mode = _PRECISION_ALIASES.get(str(precision or "").strip().lower())
    if mode is None:
        allowed = ", ".join(sorted(_PRECISION_ALIASES))
        raise InvalidInputError(f"unknown ayanamsa precision '{precision}' (allowed: {allowed})")

    base = PRESETS_J2000_DEG[preset]
    if mode == "linear":
        return LinearPrecession(preset=preset, base_deg=base)
    return AccumulatedPrecession(preset=preset, base_deg=base)


# ───────────────────────────── Public helpers ─────────────────────────
def precession_correction(instant: float, strategy: AyanamsaStrategy = DEFAULT_STRATEGY) -> AngularPosition:
    return AngularPosition(strategy.correction(instant))


def precession_between(start: float, end: float, strategy: AyanamsaStrategy = DEFAULT_STRATEGY) -> float:
    """Precession accumulated from ``start`` to ``end`` (degrees, signed)."""
    return strategy.correction(end) - strategy.correction(start)


def tropical_to_sidereal(
    longitude: float, instant: float, strategy: AyanamsaStrategy = DEFAULT_STRATEGY
) -> AngularPosition:
    return AngularPosition(float(longitude) - strategy.correction(instant))
