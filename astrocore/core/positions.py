# -*- coding: utf-8 -*-
"""
Truncated-series positions of the Sun, Moon and mean lunar node.

What this module is (and is not):
- Mean elements + finite periodic correction series after Meeus,
  *Astronomical Algorithms* (2nd ed.): ch. 25 (Sun, low accuracy),
  ch. 47 (Moon, Table 47.A longitude terms), ch. 22 (mean obliquity),
  ch. 28 (equation of time).
- Geometric longitudes referred to the mean equinox of date; no nutation,
  aberration or light-time. Accuracy is ~0.01° for the Sun and ~0.003° for the
  Moon, which is what the return solver and chart caster need.
- Not an ephemeris: there is no perturbation theory for the planets here.

Public API:
    sun_longitude(instant) -> AngularPosition
    moon_longitude(instant) -> AngularPosition
    mean_node_longitude(instant) -> AngularPosition
    obliquity(instant) -> float (degrees)
    equation_of_time(instant) -> float (minutes, apparent − mean solar time)
    tropical_longitude(body, instant) -> AngularPosition
    ephemeris_snapshot(instant, bodies, strategy) -> EphemerisSnapshot
    BODY_MODELS: Body → BodyModel (longitude function + mean apparent rate)
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple
import math

from astrocore.core.ayanamsa import DEFAULT_STRATEGY, AyanamsaStrategy
from astrocore.core.constants import delta_deg, wrap_deg
from astrocore.core.coordinates import ecliptic_to_equatorial
from astrocore.core.time_kernel import julian_centuries
from astrocore.core.types import AngularPosition, Body, BodyModel, EphemerisSnapshot, Instant

__all__ = [
    "sun_longitude",
    "moon_longitude",
    "mean_node_longitude",
    "obliquity",
    "equation_of_time",
    "tropical_longitude",
    "ephemeris_snapshot",
    "MEAN_RATE_DEG_PER_DAY",
    "BODY_MODELS",
    "ALL_BODIES",
]


def _sind(a: float) -> float: return math.sin(math.radians(a))


def _centuries(instant: float) -> float:
    return julian_centuries(Instant(instant))


# ───────────────────────────── Sun ────────────────────────────────────
def _sun_elements(t: float) -> Tuple[float, float, float]:
    """(mean longitude L0, mean anomaly M, equation of centre C), degrees."""
    l0 = wrap_deg(280.46646 + 36000.76983 * t + 0.0003032 * t * t)
    m = wrap_deg(357.52911 + 35999.05029 * t - 0.0001537 * t * t)
    c = (
        (1.914602 - 0.004817 * t - 0.000014 * t * t) * _sind(m)
        + (0.019993 - 0.000101 * t) * _sind(2.0 * m)
        + 0.000289 * _sind(3.0 * m)
    )
    return l0, m, c


def sun_longitude(instant: float) -> AngularPosition:
    """True (geometric) ecliptic longitude of the Sun: L0 + C."""
    l0, _m, c = _sun_elements(_centuries(instant))
    return AngularPosition(l0 + c)


# ───────────────────────────── Moon ───────────────────────────────────
# Meeus Table 47.A, longitude column: multiples of (D, M, M', F) and Σl
# coefficient in 1e-6 degree.
_MOON_LONGITUDE_TERMS: Tuple[Tuple[int, int, int, int, int], ...] = (
    (0, 0, 1, 0, 6288774),
    (2, 0, -1, 0, 1274027),
    (2, 0, 0, 0, 658314),
    (0, 0, 2, 0, 213618),
    (0, 1, 0, 0, -185116),
    (0, 0, 0, 2, -114332),
    (2, 0, -2, 0, 58793),
    (2, -1, -1, 0, 57066),
    (2, 0, 1, 0, 53322),
    (2, -1, 0, 0, 45758),
    (0, 1, -1, 0, -40923),
    (1, 0, 0, 0, -34720),
    (0, 1, 1, 0, -30383),
    (2, 0, 0, -2, 15327),
    (0, 0, 1, 2, -12528),
    (0, 0, 1, -2, 10980),
    (4, 0, -1, 0, 10675),
    (0, 0, 3, 0, 10034),
    (4, 0, -2, 0, 8548),
    (2, 1, -1, 0, -7888),
    (2, 1, 0, 0, -6766),
    (1, 0, -1, 0, -5163),
    (1, 1, 0, 0, 4987),
    (2, -1, 1, 0, 4036),
    (2, 0, 2, 0, 3994),
    (4, 0, 0, 0, 3861),
    (2, 0, -3, 0, 3665),
    (0, 1, -2, 0, -2689),
    (2, 0, -1, 2, -2602),
    (2, -1, -2, 0, 2390),
    (1, 0, 1, 0, -2348),
    (2, -2, 0, 0, 2236),
    (0, 1, 2, 0, -2120),
    (0, 2, 0, 0, -2069),
    (2, -2, -1, 0, 2048),
    (2, 0, 1, -2, -1773),
    (2, 0, 0, 2, -1595),
    (4, -1, -1, 0, 1215),
    (0, 0, 2, 2, -1110),
    (3, 0, -1, 0, -892),
    (2, 1, 1, 0, -810),
    (4, -1, -2, 0, 759),
    (0, 2, -1, 0, -713),
    (2, 2, -1, 0, -700),
    (2, 1, -2, 0, 691),
    (2, -1, 0, -2, 596),
    (4, 0, 1, 0, 549),
    (0, 0, 4, 0, 537),
    (4, -1, 0, 0, 520),
    (1, 0, -2, 0, -487),
    (2, 1, 0, -2, -399),
    (0, 0, 2, -2, -381),
    (1, 1, 1, 0, 351),
    (3, 0, -2, 0, -340),
    (4, 0, -3, 0, 330),
    (2, -1, 2, 0, 327),
    (0, 2, 1, 0, -323),
    (1, 1, -1, 0, 299),
    (2, 0, 3, 0, 294),
)


def moon_longitude(instant: float) -> AngularPosition:
    t = _centuries(instant)
    t2, t3, t4 = t * t, t * t * t, t * t * t * t

    lp = wrap_deg(218.3164477 + 481267.88123421 * t - 0.0015786 * t2 + t3 / 538841.0 - t4 / 65194000.0)
    d = wrap_deg(297.8501921 + 445267.1114034 * t - 0.0018819 * t2 + t3 / 545868.0 - t4 / 113065000.0)
    m = wrap_deg(357.5291092 + 35999.0502909 * t - 0.0001536 * t2 + t3 / 24490000.0)
    mp = wrap_deg(134.9633964 + 477198.8675055 * t + 0.0087414 * t2 + t3 / 69699.0 - t4 / 14712000.0)
    f = wrap_deg(93.2720950 + 483202.0175233 * t - 0.0036539 * t2 - t3 / 3526000.0 + t4 / 863310000.0)

    a1 = wrap_deg(119.75 + 131.849 * t)
    a2 = wrap_deg(53.09 + 479264.290 * t)
    e = 1.0 - 0.002516 * t - 0.0000074 * t2

    sigma = 0.0
    for cd, cm, cmp, cf, coeff in _MOON_LONGITUDE_TERMS:
        term = coeff * _sind(cd * d + cm * m + cmp * mp + cf * f)
        if cm:
            term *= e ** abs(cm)
        sigma += term

    # additive terms: Venus (A1), Jupiter (A2), flattening of the Earth (L' − F)
    sigma += 3958.0 * _sind(a1) + 1962.0 * _sind(lp - f) + 318.0 * _sind(a2)

    return AngularPosition(lp + sigma / 1_000_000.0)


# ───────────────────────────── Node ───────────────────────────────────
def mean_node_longitude(instant: float) -> AngularPosition:
    """Mean ascending node of the lunar orbit (Rahu); always retrograde."""
    t = _centuries(instant)
    omega = (
        125.0445479 - 1934.1362891 * t + 0.0020754 * t * t
        + t ** 3 / 467441.0 - t ** 4 / 60616000.0
    )
    return AngularPosition(omega)


# ───────────────────────────── Obliquity / EoT ────────────────────────
def obliquity(instant: float) -> float:
    """Mean obliquity of the ecliptic (IAU 1980, Meeus eq. 22.2), degrees."""
    t = _centuries(instant)
    arcsec = 21.448 - 46.8150 * t - 0.00059 * t * t + 0.001813 * t * t * t
    return 23.0 + 26.0 / 60.0 + arcsec / 3600.0


def equation_of_time(instant: float) -> float:
    """
    Equation of time in minutes (positive: sundial ahead of mean time).

    E = L0 − α, with α the right ascension of the true Sun (L0 + C) at the
    obliquity of date; the eccentricity and mean anomaly enter through C.
    """
    l0, _m, c = _sun_elements(_centuries(instant))
    ra = ecliptic_to_equatorial(l0 + c, 0.0, obliquity(instant)).right_ascension
    return 4.0 * delta_deg(float(ra), l0)   # 1° of hour angle = 4 minutes


# ───────────────────────────── Body registry ──────────────────────────
MEAN_RATE_DEG_PER_DAY: Mapping[Body, float] = MappingProxyType({
    Body.SUN: 0.98564736,
    Body.MOON: 13.17639648,
    Body.RAHU: -0.05295377,
    Body.KETU: -0.05295377,
})


def _ketu_longitude(instant: float) -> AngularPosition:
    return AngularPosition(mean_node_longitude(instant) + 180.0)


BODY_MODELS: Mapping[Body, BodyModel] = MappingProxyType({
    Body.SUN: BodyModel("Sun", MEAN_RATE_DEG_PER_DAY[Body.SUN], sun_longitude),
    Body.MOON: BodyModel("Moon", MEAN_RATE_DEG_PER_DAY[Body.MOON], moon_longitude),
    Body.RAHU: BodyModel("Rahu", MEAN_RATE_DEG_PER_DAY[Body.RAHU], mean_node_longitude),
    Body.KETU: BodyModel("Ketu", MEAN_RATE_DEG_PER_DAY[Body.KETU], _ketu_longitude),
})

ALL_BODIES: Tuple[Body, ...] = tuple(Body)


def tropical_longitude(body: Body, instant: float) -> AngularPosition:
    return AngularPosition(BODY_MODELS[Body.parse(body)].longitude(instant))


def ephemeris_snapshot(
    instant: float,
    bodies: Optional[Iterable[Body]] = None,
    strategy: AyanamsaStrategy = DEFAULT_STRATEGY,
) -> EphemerisSnapshot:
    """Fresh sidereal snapshot; pass ``NoPrecession()`` for tropical longitudes."""
    jd = Instant(instant)
    wanted = ALL_BODIES if bodies is None else tuple(Body.parse(b) for b in bodies)
    ay = strategy.correction(jd)
    return EphemerisSnapshot(
        instant=jd,
        positions=tuple((b, AngularPosition(tropical_longitude(b, jd) - ay)) for b in wanted),
    )
