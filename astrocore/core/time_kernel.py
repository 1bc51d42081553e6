# astrocore/core/time_kernel.py
from __future__ import annotations
"""
time_kernel.py — civil date/time ⇄ continuous day number (Julian Day, UTC).

- Proleptic Gregorian calendar on both directions (no Julian-calendar switch).
- Day numbers are plain floats wrapped in ``Instant``; the epoch constant
  J2000 = 2451545.0 is 2000-01-01 12:00:00 UTC exactly.
- Inverse conversion adds the half-day offset before taking the integer part
  and rounds seconds-of-day to the millisecond, carrying a rounded midnight
  into the next civil day.

API:
  to_instant(year, month, day, hour=0, minute=0, second=0.0) -> Instant
  to_civil(instant)                                           -> CivilDateTime
  julian_centuries(instant)                                   -> float
  instant_from_datetime(dt)                                   -> Instant
  to_datetime(instant)                                        -> datetime (UTC)
"""
from datetime import datetime, timedelta, timezone
import math

from astrocore.core.constants import (
    J2000,
    JD_MAX,
    JD_MIN,
    JULIAN_CENTURY_D,
    SECONDS_PER_DAY,
)
from astrocore.core.errors import InvalidInputError
from astrocore.core.types import CivilDateTime, Instant

__all__ = [
    "to_instant",
    "to_civil",
    "julian_centuries",
    "instant_from_datetime",
    "to_datetime",
]


# ──────────────────────────────────────────────────────────────────────────────
# Civil → day number
# ──────────────────────────────────────────────────────────────────────────────
def to_instant(
    year: float,
    month: float,
    day: float,
    hour: float = 0.0,
    minute: float = 0.0,
    second: float = 0.0,
) -> Instant:
    """
    Meeus ch. 7 day-number formula on the proleptic Gregorian calendar.

    No calendar validation: out-of-range fields simply roll over
    (e.g. Feb 30 → Mar 1/2), which callers rely on for window arithmetic.
    """
    y = float(year)
    m = float(month)
    decimal_day = float(day) + (float(hour) + float(minute) / 60.0 + float(second) / 3600.0) / 24.0

    # January and February count as months 13 and 14 of the prior year.
    if m <= 2:
        y -= 1.0
        m += 12.0

    a = math.floor(y / 100.0)
    b = 2.0 - a + math.floor(a / 4.0)

    jd = (
        math.floor(365.25 * (y + 4716.0))
        + math.floor(30.6001 * (m + 1.0))
        + decimal_day + b - 1524.5
    )
    return Instant(jd)


# ──────────────────────────────────────────────────────────────────────────────
# Day number → civil
# ──────────────────────────────────────────────────────────────────────────────
def _validate_jd(jd: float) -> float:
    try:
        v = float(jd)
    except (TypeError, ValueError):
        raise InvalidInputError(f"instant must be a number, got {jd!r}") from None
    if not math.isfinite(v) or not (JD_MIN <= v < JD_MAX):
        raise InvalidInputError(
            f"invalid Julian Day {v!r}; must be finite and within [{JD_MIN:.0f}, {JD_MAX:.0f})"
        )
    return v


def _civil_from_day_number(z: int):
    """Integer day number (civil day starting at midnight) → (year, month, day)."""
    a = z + 32044
    b = (4 * a + 3) // 146097
    c = a - (146097 * b) // 4
    d = (4 * c + 3) // 1461
    e = c - (1461 * d) // 4
    m = (5 * e + 2) // 153

    day = e - (153 * m + 2) // 5 + 1
    month = m + 3 - 12 * (m // 10)
    year = 100 * b + d - 4800 + m // 10
    return year, month, day


def to_civil(instant: float) -> CivilDateTime:
    jd = _validate_jd(instant)

    shifted = jd + 0.5
    z = math.floor(shifted)
    sod = round((shifted - z) * SECONDS_PER_DAY, 3)  # seconds of day, ms resolution
    if sod >= SECONDS_PER_DAY:
        z += 1
        sod -= SECONDS_PER_DAY

    year, month, day = _civil_from_day_number(int(z))

    hour = int(sod // 3600.0)
    minute = int((sod - hour * 3600.0) // 60.0)
    second = round(sod - hour * 3600.0 - minute * 60.0, 3)
    return CivilDateTime(year=year, month=month, day=day, hour=hour, minute=minute, second=second)


# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────
def julian_centuries(instant: float) -> float:
    """Julian centuries elapsed since J2000."""
    return (float(instant) - J2000) / JULIAN_CENTURY_D


def instant_from_datetime(dt: datetime) -> Instant:
    """Aware datetimes are converted to UTC; naive ones are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return to_instant(
        dt.year, dt.month, dt.day,
        dt.hour, dt.minute, dt.second + dt.microsecond / 1e6,
    )


def to_datetime(instant: float) -> datetime:
    """UTC datetime for an instant (millisecond resolution)."""
    c = to_civil(instant)
    whole = int(c.second)
    base = datetime(c.year, c.month, c.day, c.hour, c.minute, whole, tzinfo=timezone.utc)
    return base + timedelta(milliseconds=round((c.second - whole) * 1000.0))
