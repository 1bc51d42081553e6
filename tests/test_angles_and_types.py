# tests/test_angles_and_types.py
from __future__ import annotations

import math
import pytest
from hypothesis import given, strategies as st

from astrocore.core.constants import abs_sep_deg, delta_deg, wrap_deg
from astrocore.core.errors import AstroError, InvalidInputError
from astrocore.core.types import (
    AngularPosition,
    Body,
    BodyModel,
    EphemerisSnapshot,
    Instant,
    Location,
    NatalReferencePoint,
    ReturnEvent,
    ReturnStatus,
)

finite_angles = st.floats(min_value=-1e6, max_value=1e6, allow_nan=False, allow_infinity=False)


# ─────────────────────────────────────────────────────────────────────────────
# Angle helpers
# ─────────────────────────────────────────────────────────────────────────────

@given(finite_angles)
def test_wrap_is_in_range(x: float) -> None:
    w = wrap_deg(x)
    assert 0.0 <= w < 360.0

@given(finite_angles)
def test_angular_position_normalised(x: float) -> None:
    assert 0.0 <= AngularPosition(x) < 360.0

@given(finite_angles, finite_angles)
def test_delta_in_half_open_range(a: float, b: float) -> None:
    d = delta_deg(a, b)
    assert -180.0 < d <= 180.0

@given(finite_angles, finite_angles)
def test_separation_symmetric(a: float, b: float) -> None:
    assert abs_sep_deg(a, b) == pytest.approx(abs_sep_deg(b, a), abs=1e-9)
    assert 0.0 <= abs_sep_deg(a, b) <= 180.0

def test_separation_across_seam() -> None:
    assert abs_sep_deg(350.0, 10.0) == pytest.approx(20.0)
    assert delta_deg(350.0, 10.0) == pytest.approx(20.0)
    assert delta_deg(10.0, 350.0) == pytest.approx(-20.0)

def test_tiny_negative_wraps_to_zero() -> None:
    assert wrap_deg(-1e-20) == 0.0
    assert wrap_deg(360.0) == 0.0
    assert wrap_deg(-90.0) == 270.0

def test_equivalent_angles_construct_equal_positions() -> None:
    assert AngularPosition(370.0) == AngularPosition(10.0)
    assert AngularPosition(-350.0) == AngularPosition(10.0)
    assert AngularPosition(720.0) == 0.0


# ─────────────────────────────────────────────────────────────────────────────
# Value types
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf, "abc", None])
def test_instant_rejects_non_finite(bad) -> None:
    with pytest.raises(InvalidInputError):
        Instant(bad)
    with pytest.raises(InvalidInputError):
        AngularPosition(bad)

def test_instant_shift() -> None:
    t = Instant(2451545.0)
    assert isinstance(t.shifted(1.5), Instant)
    assert t.shifted(1.5) == 2451546.5

@pytest.mark.parametrize("lat,lon", [(90.1, 0.0), (-91.0, 0.0), (0.0, 180.5), (0.0, -181.0), (math.nan, 0.0)])
def test_location_rejects_out_of_range(lat: float, lon: float) -> None:
    with pytest.raises(InvalidInputError):
        Location(latitude=lat, longitude=lon)

def test_location_accepts_bounds() -> None:
    Location(latitude=90.0, longitude=180.0)
    Location(latitude=-90.0, longitude=-180.0)

@pytest.mark.parametrize(
    "raw,expected",
    [("Sun", Body.SUN), ("moon", Body.MOON), ("North Node", Body.RAHU),
     ("south node", Body.KETU), (Body.KETU, Body.KETU)],
)
def test_body_parse(raw, expected) -> None:
    assert Body.parse(raw) is expected

def test_body_parse_unknown() -> None:
    with pytest.raises(InvalidInputError):
        Body.parse("Pluto")

def test_body_model_cycle_and_direction() -> None:
    prograde = BodyModel("p", 2.0, lambda t: 0.0)
    retro = BodyModel("r", -0.5, lambda t: 0.0)
    assert prograde.cycle_days == 180.0 and prograde.direction == 1
    assert retro.cycle_days == 720.0 and retro.direction == -1
    with pytest.raises(InvalidInputError):
        BodyModel("still", 0.0, lambda t: 0.0)

def test_snapshot_lookup_and_duplicates() -> None:
    snap = EphemerisSnapshot.build(2451545.0, {Body.SUN: 370.0, "Moon": 20.0})
    assert snap["sun"] == 10.0
    assert Body.MOON in snap and "Moon" in snap
    assert Body.RAHU not in snap
    assert len(snap) == 2
    assert snap.as_dict() == {"Sun": 10.0, "Moon": 20.0}
    with pytest.raises(KeyError):
        _ = snap[Body.KETU]
    with pytest.raises(InvalidInputError):
        EphemerisSnapshot(
            instant=Instant(2451545.0),
            positions=((Body.SUN, AngularPosition(1.0)), (Body.SUN, AngularPosition(2.0))),
        )

def test_snapshot_membership_accepts_aliases() -> None:
    snap = EphemerisSnapshot.build(2451545.0, {"Sun": 10.0, "Rahu": 200.0})
    assert "sun" in snap and " SUN " in snap
    assert "north node" in snap
    assert "moon" not in snap
    assert "Pluto" not in snap
    assert 42 not in snap

def test_natal_reference_normalises() -> None:
    ref = NatalReferencePoint(body="sun", target=365.0)
    assert ref.body is Body.SUN
    assert ref.target == 5.0

def test_return_event_unwrap() -> None:
    ok = ReturnEvent(
        status=ReturnStatus.CONVERGED, body="Sun", target_deg=1.0,
        window_start=0.0, window_length_days=1.0, instant=Instant(0.5),
    )
    assert ok.unwrap() == 0.5

    err = InvalidInputError("window length must be positive")
    bad = ReturnEvent(
        status=ReturnStatus.INVALID_WINDOW, body="Sun", target_deg=1.0,
        window_start=0.0, window_length_days=0.0, error=err,
    )
    assert not bad.converged
    with pytest.raises(InvalidInputError):
        bad.unwrap()

def test_error_codes_render() -> None:
    e = InvalidInputError("latitude must be within [-90, 90]")
    assert isinstance(e, AstroError) and isinstance(e, ValueError)
    assert str(e).startswith("invalid_input: ")
    assert e.message == "latitude must be within [-90, 90]"
