# tests/test_time_kernel.py
from __future__ import annotations

import math
import pytest
from datetime import datetime, timedelta, timezone
from hypothesis import given, strategies as st

from astrocore.core.constants import J2000
from astrocore.core.errors import InvalidInputError
from astrocore.core.time_kernel import (
    instant_from_datetime,
    julian_centuries,
    to_civil,
    to_datetime,
    to_instant,
)

EPS = 1e-9  # JD tolerance (~0.1 ms)


# ─────────────────────────────────────────────────────────────────────────────
# Reference values (Meeus, Astronomical Algorithms, ch. 7)
# ─────────────────────────────────────────────────────────────────────────────

def test_epoch_is_exact() -> None:
    assert to_instant(2000, 1, 1, 12, 0, 0) == J2000
    assert julian_centuries(J2000) == 0.0

@pytest.mark.parametrize(
    "args,jd",
    [
        ((1957, 10, 4.81), 2436116.31),     # Sputnik 1
        ((1987, 1, 27.0), 2446822.5),
        ((1987, 6, 19.5), 2446966.0),
        ((1988, 1, 27.0), 2447187.5),
        ((1988, 6, 19.5), 2447332.0),
        ((1900, 1, 1.0), 2415020.5),
        ((1600, 1, 1.0), 2305447.5),
        ((1600, 12, 31.0), 2305812.5),
    ],
)
def test_meeus_examples(args, jd) -> None:
    assert to_instant(*args) == pytest.approx(jd, abs=EPS)

@given(
    st.integers(min_value=1600, max_value=2500),
    st.integers(min_value=1, max_value=12),
    st.integers(min_value=1, max_value=28),
)
def test_matches_erfa_cal2jd(ensure_erfa, year: int, month: int, day: int) -> None:
    djm0, djm = ensure_erfa.cal2jd(year, month, day)
    assert to_instant(year, month, day) == pytest.approx(float(djm0) + float(djm), abs=EPS)

def test_overflowing_fields_roll_over() -> None:
    assert to_instant(2023, 2, 29) == to_instant(2023, 3, 1)
    assert to_instant(2024, 1, 1, 24) == to_instant(2024, 1, 2)


# ─────────────────────────────────────────────────────────────────────────────
# Inverse conversion
# ─────────────────────────────────────────────────────────────────────────────

def test_civil_of_epoch() -> None:
    c = to_civil(J2000)
    assert c.as_tuple() == (2000, 1, 1, 12, 0, 0.0)

def test_civil_of_midnight() -> None:
    c = to_civil(2451544.5)
    assert c.as_tuple() == (2000, 1, 1, 0, 0, 0.0)

def test_rounded_midnight_carries_into_next_day() -> None:
    c = to_civil(2451544.5 - 1e-9)   # ~86 µs before midnight
    assert c.as_tuple() == (2000, 1, 1, 0, 0, 0.0)

def test_leap_day() -> None:
    c = to_civil(to_instant(2024, 2, 29, 6, 15, 30))
    assert c.as_tuple() == (2024, 2, 29, 6, 15, 30.0)

@given(
    st.integers(min_value=1000, max_value=3000),
    st.integers(min_value=1, max_value=12),
    st.integers(min_value=1, max_value=28),
    st.integers(min_value=0, max_value=23),
    st.integers(min_value=0, max_value=59),
    st.integers(min_value=0, max_value=59_999),
)
def test_round_trip_millisecond(year, month, day, hour, minute, millis) -> None:
    second = millis / 1000.0
    c = to_civil(to_instant(year, month, day, hour, minute, second))
    assert (c.year, c.month, c.day, c.hour, c.minute) == (year, month, day, hour, minute)
    assert c.second == pytest.approx(second, abs=1e-6)

@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf, -0.5, 1e7, 2e7, "x"])
def test_to_civil_rejects_out_of_range(bad) -> None:
    with pytest.raises(InvalidInputError):
        to_civil(bad)


# ─────────────────────────────────────────────────────────────────────────────
# datetime helpers
# ─────────────────────────────────────────────────────────────────────────────

def test_datetime_round_trip_utc() -> None:
    dt = datetime(1990, 6, 15, 14, 30, 5, 250000, tzinfo=timezone.utc)
    back = to_datetime(instant_from_datetime(dt))
    assert abs((back - dt).total_seconds()) < 1e-3

def test_aware_datetime_converted_to_utc() -> None:
    ist = timezone(timedelta(hours=5, minutes=30))
    local = datetime(2000, 1, 1, 17, 30, tzinfo=ist)
    assert instant_from_datetime(local) == pytest.approx(J2000, abs=EPS)

def test_naive_datetime_taken_as_utc() -> None:
    assert instant_from_datetime(datetime(2000, 1, 1, 12)) == J2000
