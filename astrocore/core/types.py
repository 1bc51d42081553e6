# -*- coding: utf-8 -*-
"""
Immutable value types passed between the core modules.

- ``Instant`` / ``AngularPosition`` are ``float`` subclasses: they behave like
  numbers in arithmetic but validate (and, for angles, normalise) on creation,
  so a value of either type is always finite and an angle is always in [0, 360).
- Records are frozen dataclasses; an "updated" value is a new instance.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple, Union
import math

from astrocore.core.constants import HOUSE_COUNT, wrap_deg
from astrocore.core.errors import AstroError, InvalidInputError

__all__ = [
    "require_finite",
    "Instant",
    "AngularPosition",
    "CivilDateTime",
    "Location",
    "Body",
    "BodyModel",
    "EphemerisSnapshot",
    "NatalReferencePoint",
    "ReturnStatus",
    "ReturnEvent",
    "Aspect",
    "ChartSnapshot",
]


def require_finite(value: Any, what: str) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{what} must be a number, got {value!r}") from None
    if not math.isfinite(v):
        raise InvalidInputError(f"{what} must be finite, got {v!r}")
    return v


# ───────────────────────────── Scalars ─────────────────────────────────
class Instant(float):
    """Julian Day number (days; the fraction encodes the time of day, UTC)."""

    __slots__ = ()

    def __new__(cls, value: Any) -> "Instant":
        return super().__new__(cls, require_finite(value, "instant"))

    def __repr__(self) -> str:
        return f"Instant({float(self)!r})"

    def shifted(self, days: float) -> "Instant":
        return Instant(float(self) + float(days))


class AngularPosition(float):
    """Angle in degrees, normalised to [0, 360) at construction."""

    __slots__ = ()

    def __new__(cls, value: Any) -> "AngularPosition":
        return super().__new__(cls, wrap_deg(require_finite(value, "angle")))

    def __repr__(self) -> str:
        return f"AngularPosition({float(self)!r})"


# ───────────────────────────── Records ─────────────────────────────────
@dataclass(frozen=True)
class CivilDateTime:
    """UTC civil date/time; ``second`` carries millisecond resolution."""
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: float

    def as_tuple(self) -> Tuple[int, int, int, int, int, float]:
        return (self.year, self.month, self.day, self.hour, self.minute, self.second)


@dataclass(frozen=True)
class Location:
    """Geographic position; longitude is east-positive."""
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        lat = require_finite(self.latitude, "latitude")
        lon = require_finite(self.longitude, "longitude")
        if not -90.0 <= lat <= 90.0:
            raise InvalidInputError(f"latitude must be within [-90, 90], got {lat}")
        if not -180.0 <= lon <= 180.0:
            raise InvalidInputError(f"longitude must be within [-180, 180] (east positive), got {lon}")
        object.__setattr__(self, "latitude", lat)
        object.__setattr__(self, "longitude", lon)


class Body(str, Enum):
    SUN = "Sun"
    MOON = "Moon"
    RAHU = "Rahu"   # mean ascending lunar node
    KETU = "Ketu"   # descending node, always opposite Rahu

    @classmethod
    def parse(cls, value: Union["Body", str]) -> "Body":
        if isinstance(value, Body):
            return value
        key = str(value).strip().lower()
        hit = _BODY_ALIASES.get(key)
        if hit is None:
            allowed = ", ".join(b.value for b in cls)
            raise InvalidInputError(f"'{value}' is not a supported body (allowed: {allowed})")
        return hit


_BODY_ALIASES: Dict[str, Body] = {
    "sun": Body.SUN,
    "moon": Body.MOON,
    "rahu": Body.RAHU,
    "north node": Body.RAHU,
    "mean node": Body.RAHU,
    "ketu": Body.KETU,
    "south node": Body.KETU,
}


@dataclass(frozen=True)
class BodyModel:
    """
    How a body moves, as far as the return solver is concerned.

    ``mean_rate_deg_per_day`` is signed (negative for retrograde-only bodies
    such as the mean node) and sets the longest window the bisection may
    search: one apparent cycle, ``360 / |rate|`` days.
    """
    name: str
    mean_rate_deg_per_day: float
    longitude: Callable[[float], float] = field(compare=False, repr=False)

    def __post_init__(self) -> None:
        rate = require_finite(self.mean_rate_deg_per_day, "mean_rate_deg_per_day")
        if rate == 0.0:
            raise InvalidInputError(f"{self.name}: mean rate must be non-zero")
        object.__setattr__(self, "mean_rate_deg_per_day", rate)

    @property
    def cycle_days(self) -> float:
        return 360.0 / abs(self.mean_rate_deg_per_day)

    @property
    def direction(self) -> int:
        return 1 if self.mean_rate_deg_per_day > 0.0 else -1


@dataclass(frozen=True)
class EphemerisSnapshot:
    """Sidereal longitudes of a set of bodies at exactly one instant."""
    instant: Instant
    positions: Tuple[Tuple[Body, AngularPosition], ...]

    def __post_init__(self) -> None:
        seen = [b for b, _ in self.positions]
        if len(seen) != len(set(seen)):
            raise InvalidInputError("ephemeris snapshot lists a body twice")

    @classmethod
    def build(cls, instant: float, longitudes: Mapping[Body, float]) -> "EphemerisSnapshot":
        return cls(
            instant=Instant(instant),
            positions=tuple((Body.parse(b), AngularPosition(v)) for b, v in longitudes.items()),
        )

    def __getitem__(self, body: Union[Body, str]) -> AngularPosition:
        key = Body.parse(body)
        for b, lon in self.positions:
            if b is key:
                return lon
        raise KeyError(key.value)

    def __contains__(self, body: object) -> bool:
        try:
            key = Body.parse(body)
        except InvalidInputError:
            return False
        return any(b is key for b, _ in self.positions)

    def __iter__(self) -> Iterator[Body]:
        return (b for b, _ in self.positions)

    def __len__(self) -> int:
        return len(self.positions)

    def items(self) -> Tuple[Tuple[Body, AngularPosition], ...]:
        return self.positions

    def as_dict(self) -> Dict[str, float]:
        return {b.value: float(lon) for b, lon in self.positions}


@dataclass(frozen=True)
class NatalReferencePoint:
    """A body's natal sidereal longitude, used as a read-only return target."""
    body: Body
    target: AngularPosition

    def __post_init__(self) -> None:
        object.__setattr__(self, "body", Body.parse(self.body))
        object.__setattr__(self, "target", AngularPosition(self.target))


class ReturnStatus(str, Enum):
    CONVERGED = "converged"
    EXCEEDED_ITERATIONS = "exceeded_iterations"
    INVALID_WINDOW = "invalid_window"
    INVALID_INPUT = "invalid_input"
    DOMAIN_VIOLATION = "domain_violation"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ReturnEvent:
    """
    Outcome of one return search.

    ``separation_deg`` is the achieved |error| when converged and the last
    computed signed separation otherwise (None if no evaluation happened).
    """
    status: ReturnStatus
    body: str
    target_deg: float
    window_start: float
    window_length_days: float
    instant: Optional[Instant] = None
    separation_deg: Optional[float] = None
    iterations: int = 0
    error: Optional[AstroError] = field(default=None, compare=False)

    @property
    def converged(self) -> bool:
        return self.status is ReturnStatus.CONVERGED

    def unwrap(self) -> Instant:
        """Return the instant, or raise the carried error."""
        if self.converged and self.instant is not None:
            return self.instant
        if self.error is not None:
            raise self.error
        raise AstroError(f"return search ended with status {self.status.value}")


@dataclass(frozen=True)
class Aspect:
    a: Body
    b: Body
    name: str
    exact_deg: float         # canonical angle
    separation_deg: float    # measured, [0, 180]
    delta_deg: float         # |separation - exact|


@dataclass(frozen=True)
class ChartSnapshot:
    instant: Instant
    location: Location
    ascendant: AngularPosition
    midheaven: AngularPosition
    houses: Tuple[AngularPosition, ...]
    ephemeris: EphemerisSnapshot
    aspects: Tuple[Aspect, ...]
    ayanamsa_deg: float
    local_sidereal_deg: AngularPosition
    obliquity_deg: float
    house_system: str
    ayanamsa_name: str

    def __post_init__(self) -> None:
        if len(self.houses) != HOUSE_COUNT:
            raise InvalidInputError(f"a chart needs {HOUSE_COUNT} house cusps, got {len(self.houses)}")
