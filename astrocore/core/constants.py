# -*- coding: utf-8 -*-
"""
astrocore — core constants & small helpers

Purpose
-------
Single source of truth for:
- epoch / time-unit constants (J2000, Julian century, seconds per day)
- solver defaults (tolerance, iteration cap, lunar & solar periods)
- aspect angles and the default orb
- house system aliases (stable canonical keys)
- tiny angle helpers (wrap/Δ/separation)

Design
------
- Pure-Python, no external dependencies.
- Safe to import from any core module.
- Functions are pure; constants are immutable by convention.
"""

from __future__ import annotations
from types import MappingProxyType
from typing import Mapping
import math

__all__ = [
    # epochs & units
    "J2000", "JULIAN_CENTURY_D", "JULIAN_YEAR_D", "SECONDS_PER_DAY",
    "JD_MIN", "JD_MAX",
    # periods
    "TROPICAL_YEAR_D", "LUNAR_SIDEREAL_D", "LUNAR_SYNODIC_D",
    # solver defaults
    "CONVERGENCE_THRESHOLD_DEG", "MAX_ITERATIONS", "SOLAR_HALF_WINDOW_D",
    # aspects
    "ASPECT_ANGLES_DEG", "DEFAULT_ORB_DEG",
    # houses
    "HOUSE_COUNT", "DEGREES_PER_SIGN", "HOUSE_SYSTEM_ALIASES",
    # helpers
    "wrap_deg", "delta_deg", "abs_sep_deg", "is_finite",
]

# ── epochs & units ───────────────────────────────────────────────────────────
J2000: float = 2451545.0            # 2000-01-01 12:00 UTC
JULIAN_CENTURY_D: float = 36525.0
JULIAN_YEAR_D: float = 365.25
SECONDS_PER_DAY: float = 86400.0

# Sane astronomical range accepted by the inverse calendar conversion.
JD_MIN: float = 0.0
JD_MAX: float = 10_000_000.0

# ── periods ──────────────────────────────────────────────────────────────────
TROPICAL_YEAR_D: float = 365.242189
LUNAR_SIDEREAL_D: float = 27.321582
LUNAR_SYNODIC_D: float = 29.530588

# ── solver defaults ──────────────────────────────────────────────────────────
CONVERGENCE_THRESHOLD_DEG: float = 0.0001
MAX_ITERATIONS: int = 50
SOLAR_HALF_WINDOW_D: float = 5.0     # solar returns search ±5 days

# ── aspect geometry ──────────────────────────────────────────────────────────
ASPECT_ANGLES_DEG: Mapping[str, float] = MappingProxyType({
    "conjunction": 0.0,
    "sextile": 60.0,
    "square": 90.0,
    "trine": 120.0,
    "opposition": 180.0,
})

DEFAULT_ORB_DEG: float = 8.0

# ── houses ───────────────────────────────────────────────────────────────────
HOUSE_COUNT: int = 12
DEGREES_PER_SIGN: float = 30.0

# Use these keys uniformly; map user inputs to them.
HOUSE_SYSTEM_ALIASES: Mapping[str, str] = MappingProxyType({
    # canonical → self
    "equal": "equal",
    "whole_sign": "whole_sign",
    # aliases → canonical
    "equal-house": "equal",
    "eq": "equal",
    "whole-sign": "whole_sign",
    "wholesign": "whole_sign",
    "whole": "whole_sign",
    "ws": "whole_sign",
})


# ── tiny angle helpers (no external imports) ─────────────────────────────────
def wrap_deg(x: float) -> float:
    """
    Wrap any angle to [0, 360).
    """
    r = math.fmod(float(x), 360.0)
    if r < 0.0:
        r += 360.0
    # -1e-20 + 360.0 rounds to 360.0
    return 0.0 if r >= 360.0 else r


def delta_deg(a: float, b: float) -> float:
    """
    Shortest signed difference b - a in degrees, range (-180, 180].
    Used for aspect separations and root-finding residuals.
    """
    d = wrap_deg(b) - wrap_deg(a)
    if d > 180.0:
        d -= 360.0
    elif d <= -180.0:
        d += 360.0
    return d


def abs_sep_deg(a: float, b: float) -> float:
    """
    Absolute smallest separation between angles a and b (deg, 0..180].
    """
    return abs(delta_deg(a, b))


def is_finite(x) -> bool:
    try:
        return math.isfinite(float(x))
    except (TypeError, ValueError):
        return False
