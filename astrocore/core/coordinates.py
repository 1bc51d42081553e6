# astrocore/core/coordinates.py
from __future__ import annotations
"""
Equatorial ⇄ ecliptic conversion for a given obliquity (Meeus eq. 13.1–13.4).

Quadrants are resolved with atan2 so longitude / right ascension stay
continuous across the 0°/360° seam; both are returned in [0, 360).
Latitude / declination come back in [-90, 90].
"""
from dataclasses import dataclass
import math

from astrocore.core.errors import InvalidInputError
from astrocore.core.types import AngularPosition, require_finite

__all__ = [
    "EclipticCoordinates",
    "EquatorialCoordinates",
    "equatorial_to_ecliptic",
    "ecliptic_to_equatorial",
]


@dataclass(frozen=True)
class EclipticCoordinates:
    longitude: AngularPosition
    latitude: float


@dataclass(frozen=True)
class EquatorialCoordinates:
    right_ascension: AngularPosition
    declination: float


def _sind(a: float) -> float: return math.sin(math.radians(a))
def _cosd(a: float) -> float: return math.cos(math.radians(a))


def _asind(x: float) -> float:
    # rounding can push |x| a hair past 1
    return math.degrees(math.asin(max(-1.0, min(1.0, x))))


def _check_polar(value: float, what: str) -> float:
    v = require_finite(value, what)
    if not -90.0 <= v <= 90.0:
        raise InvalidInputError(f"{what} must be within [-90, 90], got {v}")
    return v


def equatorial_to_ecliptic(right_ascension: float, declination: float, obliquity: float) -> EclipticCoordinates:
    ra = require_finite(right_ascension, "right_ascension")
    dec = _check_polar(declination, "declination")
    eps = require_finite(obliquity, "obliquity")

    # λ = atan2(sinα cosε + tanδ sinε, cosα) written without tanδ so δ = ±90 is safe
    y = _sind(ra) * _cosd(dec) * _cosd(eps) + _sind(dec) * _sind(eps)
    x = _cosd(ra) * _cosd(dec)
    lon = math.degrees(math.atan2(y, x)) if (x or y) else 0.0
    lat = _asind(_sind(dec) * _cosd(eps) - _cosd(dec) * _sind(eps) * _sind(ra))
    return EclipticCoordinates(longitude=AngularPosition(lon), latitude=lat)


def ecliptic_to_equatorial(longitude: float, latitude: float, obliquity: float) -> EquatorialCoordinates:
    lon = require_finite(longitude, "longitude")
    lat = _check_polar(latitude, "latitude")
    eps = require_finite(obliquity, "obliquity")

    y = _sind(lon) * _cosd(lat) * _cosd(eps) - _sind(lat) * _sind(eps)
    x = _cosd(lon) * _cosd(lat)
    ra = math.degrees(math.atan2(y, x)) if (x or y) else 0.0
    dec = _asind(_sind(lat) * _cosd(eps) + _cosd(lat) * _sind(eps) * _sind(lon))
    return EquatorialCoordinates(right_ascension=AngularPosition(ra), declination=dec)
