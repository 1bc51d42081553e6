# astrocore/core/chart.py
from __future__ import annotations

"""
Chart caster: one immutable ChartSnapshot per (instant, location, ayanamsa).

Pipeline:
    local sidereal angle θ  →  obliquity ε of date
    →  tropical ascendant / midheaven  →  sidereal (minus ayanamsa)
    →  12 house cusps  →  ephemeris snapshot  →  aspects between bodies

House systems:
    "equal"       cusps every 30° from the ascendant (default)
    "whole_sign"  cusps on sign boundaries, house 1 = the ascendant's sign

Everything here is deterministic: the same inputs always give equal
snapshots, and nothing is cached between calls.
"""

from itertools import combinations
from typing import Iterable, List, Optional, Sequence, Tuple
import logging
import math

from astrocore.core.ayanamsa import DEFAULT_STRATEGY, AyanamsaStrategy
from astrocore.core.constants import (
    ASPECT_ANGLES_DEG,
    DEFAULT_ORB_DEG,
    DEGREES_PER_SIGN,
    HOUSE_COUNT,
    HOUSE_SYSTEM_ALIASES,
    abs_sep_deg,
    is_finite,
    wrap_deg,
)
from astrocore.core.coordinates import equatorial_to_ecliptic
from astrocore.core.errors import InvalidInputError
from astrocore.core.positions import ephemeris_snapshot, obliquity
from astrocore.core.sidereal import local_sidereal_angle_at
from astrocore.core.types import (
    AngularPosition,
    Aspect,
    Body,
    ChartSnapshot,
    EphemerisSnapshot,
    Instant,
    Location,
)

log = logging.getLogger(__name__)

__all__ = [
    "cast_chart",
    "ascendant_angle",
    "midheaven_angle",
    "normalize_house_system",
    "equal_houses",
    "whole_sign_houses",
    "house_cusps",
    "house_of",
    "find_aspects",
    "find_cross_aspects",
]

# The nodal axis is fixed at 180°; reporting it as an opposition is noise.
_SKIPPED_PAIRS = frozenset({frozenset({Body.RAHU, Body.KETU})})


def _sind(a: float) -> float: return math.sin(math.radians(a))
def _cosd(a: float) -> float: return math.cos(math.radians(a))


# ───────────────────────────── Angles ─────────────────────────────────
def ascendant_angle(local_sidereal_deg: float, latitude: float, obliquity_deg: float) -> AngularPosition:
    """
    Tropical ascendant: atan2(cos θ, −(sin θ cos ε + tan φ sin ε)).

    Both atan2 arguments are multiplied by cos φ (≥ 0) so the quadrant is
    unchanged and φ = ±90 does not divide by zero.
    """
    theta = float(local_sidereal_deg)
    phi = float(latitude)
    if not -90.0 <= phi <= 90.0:
        raise InvalidInputError(f"latitude must be within [-90, 90], got {phi}")
    eps = float(obliquity_deg)
    y = _cosd(theta) * _cosd(phi)
    x = -(_sind(theta) * _cosd(eps) * _cosd(phi) + _sind(phi) * _sind(eps))
    return AngularPosition(math.degrees(math.atan2(y, x)))


def midheaven_angle(local_sidereal_deg: float, obliquity_deg: float) -> AngularPosition:
    """Tropical MC: the ecliptic point on the meridian (RA = θ, δ = 0)."""
    return equatorial_to_ecliptic(local_sidereal_deg, 0.0, obliquity_deg).longitude


# ───────────────────────────── Houses ─────────────────────────────────
def normalize_house_system(name: Optional[str]) -> str:
    if not name:
        return "equal"
    key = str(name).strip().lower().replace(" ", "_")
    canon = HOUSE_SYSTEM_ALIASES.get(key)
    if canon is None:
        allowed = ", ".join(sorted(set(HOUSE_SYSTEM_ALIASES.values())))
        raise InvalidInputError(f"unsupported house system '{name}' (supported: {allowed})")
    return canon


def equal_houses(ascendant: float) -> Tuple[AngularPosition, ...]:
    return tuple(AngularPosition(float(ascendant) + DEGREES_PER_SIGN * i) for i in range(HOUSE_COUNT))


def whole_sign_houses(ascendant: float) -> Tuple[AngularPosition, ...]:
    first = math.floor(wrap_deg(ascendant) / DEGREES_PER_SIGN) * DEGREES_PER_SIGN
    return tuple(AngularPosition(first + DEGREES_PER_SIGN * i) for i in range(HOUSE_COUNT))


def house_cusps(ascendant: float, house_system: str = "equal") -> Tuple[AngularPosition, ...]:
    system = normalize_house_system(house_system)
    if system == "whole_sign":
        return whole_sign_houses(ascendant)
    return equal_houses(ascendant)


def house_of(longitude: float, cusps: Sequence[float]) -> int:
    """1-based house containing ``longitude``; a cusp belongs to the house it opens."""
    if len(cusps) != HOUSE_COUNT:
        raise InvalidInputError(f"expected {HOUSE_COUNT} cusps, got {len(cusps)}")
    lon = wrap_deg(longitude)
    for i in range(HOUSE_COUNT):
        start = float(cusps[i])
        span = wrap_deg(float(cusps[(i + 1) % HOUSE_COUNT]) - start) or 360.0
        if wrap_deg(lon - start) < span:
            return i + 1
    # unreachable for cusps that go round the circle once
    raise InvalidInputError("house cusps do not partition the zodiac")


# ───────────────────────────── Aspects ────────────────────────────────
def _validated_orb(orb_deg: float) -> float:
    if not is_finite(orb_deg) or float(orb_deg) < 0.0:
        raise InvalidInputError(f"orb_deg must be a non-negative number, got {orb_deg!r}")
    return float(orb_deg)


def _closest_aspect(a: Body, la: float, b: Body, lb: float, orb: float) -> Optional[Aspect]:
    sep = abs_sep_deg(la, lb)
    best: Optional[Aspect] = None
    for name, angle in ASPECT_ANGLES_DEG.items():
        delta = abs(sep - angle)
        if delta <= orb and (best is None or delta < best.delta_deg):
            best = Aspect(a=a, b=b, name=name, exact_deg=angle, separation_deg=sep, delta_deg=delta)
    return best


def find_aspects(ephemeris: EphemerisSnapshot, orb_deg: float = DEFAULT_ORB_DEG) -> Tuple[Aspect, ...]:
    """Closest canonical aspect (if any within the orb) for every body pair."""
    orb = _validated_orb(orb_deg)

    hits: List[Aspect] = []
    for (a, la), (b, lb) in combinations(ephemeris.items(), 2):
        if frozenset({a, b}) in _SKIPPED_PAIRS:
            continue
        best = _closest_aspect(a, la, b, lb, orb)
        if best is not None:
            hits.append(best)
    return tuple(hits)


def find_cross_aspects(
    first: EphemerisSnapshot,
    second: EphemerisSnapshot,
    orb_deg: float = DEFAULT_ORB_DEG,
) -> Tuple[Aspect, ...]:
    """
    Closest aspect from every body of ``first`` to every body of ``second``.

    Used for return-to-natal contacts: ``Aspect.a`` is the body in ``first``
    (the return chart) and ``Aspect.b`` the body in ``second`` (the natal
    chart). A body meeting its own natal place counts as a conjunction, and
    no pair is skipped since the two snapshots are taken at different instants.
    """
    orb = _validated_orb(orb_deg)

    hits: List[Aspect] = []
    for a, la in first.items():
        for b, lb in second.items():
            best = _closest_aspect(a, la, b, lb, orb)
            if best is not None:
                hits.append(best)
    return tuple(hits)


# ───────────────────────────── Caster ─────────────────────────────────
def cast_chart(
    instant: float,
    location: Location,
    ayanamsa_strategy: AyanamsaStrategy = DEFAULT_STRATEGY,
    *,
    bodies: Optional[Iterable[Body]] = None,
    house_system: str = "equal",
    orb_deg: float = DEFAULT_ORB_DEG,
) -> ChartSnapshot:
    if not isinstance(location, Location):
        raise InvalidInputError(f"location must be a Location, got {type(location).__name__}")
    jd = Instant(instant)
    system = normalize_house_system(house_system)

    lst = local_sidereal_angle_at(jd, location)
    eps = obliquity(jd)
    ayanamsa = ayanamsa_strategy.correction(jd)

    asc = AngularPosition(ascendant_angle(lst, location.latitude, eps) - ayanamsa)
    mc = AngularPosition(midheaven_angle(lst, eps) - ayanamsa)
    ephemeris = ephemeris_snapshot(jd, bodies, ayanamsa_strategy)

    log.debug(
        "chart JD %.6f lat=%.4f lon=%.4f: LST=%.6f asc=%.6f mc=%.6f (%s, %s)",
        float(jd), location.latitude, location.longitude, lst, asc, mc, system, ayanamsa_strategy.name,
    )
    return ChartSnapshot(
        instant=jd,
        location=location,
        ascendant=asc,
        midheaven=mc,
        houses=house_cusps(asc, system),
        ephemeris=ephemeris,
        aspects=find_aspects(ephemeris, orb_deg),
        ayanamsa_deg=ayanamsa,
        local_sidereal_deg=lst,
        obliquity_deg=eps,
        house_system=system,
        ayanamsa_name=ayanamsa_strategy.name,
    )
