# astrocore/core/sidereal.py
from __future__ import annotations
"""
Sidereal time (Earth's rotation angle relative to the equinox).

mean_sidereal_angle uses the IAU 1982 GMST expression in the form given by
Meeus (eq. 12.4); the day number is treated as UT. Longitudes are
east-positive everywhere in astrocore.
"""
from astrocore.core.constants import J2000, wrap_deg
from astrocore.core.errors import InvalidInputError
from astrocore.core.time_kernel import julian_centuries
from astrocore.core.types import AngularPosition, Instant, Location

__all__ = ["mean_sidereal_angle", "local_sidereal_angle", "local_sidereal_angle_at"]


def mean_sidereal_angle(instant: float) -> AngularPosition:
    """Greenwich mean sidereal time in degrees."""
    jd = float(Instant(instant))
    t = julian_centuries(jd)
    theta = (
        280.46061837
        + 360.98564736629 * (jd - J2000)
        + 0.000387933 * t * t
        - (t * t * t) / 38710000.0
    )
    return AngularPosition(theta)


def local_sidereal_angle(mean_angle: float, geographic_longitude: float) -> AngularPosition:
    lon = float(geographic_longitude)
    if not -180.0 <= lon <= 180.0:
        raise InvalidInputError(f"longitude must be within [-180, 180] (east positive), got {lon}")
    return AngularPosition(wrap_deg(float(mean_angle) + lon))


def local_sidereal_angle_at(instant: float, location: Location) -> AngularPosition:
    return local_sidereal_angle(mean_sidereal_angle(instant), location.longitude)
