# astrocore/core/returns.py
# -*- coding: utf-8 -*-
"""
Return-time solver: when does a body come back to a recorded sidereal longitude?

APIs
----
find_return(body, target_sidereal_longitude, window_start, window_length_days,
            ayanamsa_strategy, *, tolerance_deg=1e-4, max_iterations=50,
            cancel=None) -> ReturnEvent
natal_reference(body, instant, strategy) -> NatalReferencePoint
solar_return(natal_instant, return_year, strategy, ...) -> ReturnEvent
lunar_return(natal_instant, search_start, strategy, ...) -> ReturnEvent
cast_return_chart(reference, window_start, window_length_days, location,
                  strategy, *, natal=None, ...) -> ReturnChart

Notes
-----
- ``body`` is a ``Body`` (looked up in ``positions.BODY_MODELS``) or any
  ``BodyModel``; the motion rate is read from the model, never assumed.
- Bisection narrows on the *progress* from the window start,
  ``direction · (λ(t) − λ(start))``, unwrapped onto the branch nearest the
  mean-motion advance ``|rate| · (t − start)``. That progress is monotonic,
  so the bracket is sound across the 0°/360° seam and stays sound when a
  fast-running Moon covers slightly more than 360° in one sidereal month.
  A window longer than one mean cycle is refused with DOMAIN_VIOLATION.
- Convergence is judged on the wrap-aware signed separation
  ``delta_deg(target, λ(mid))`` in (−180, 180].
- The solver never raises for search failures; it returns a ``ReturnEvent``
  whose ``status`` names the outcome and whose ``error`` carries the typed
  exception (``ReturnEvent.unwrap()`` re-raises it).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Union
import logging
import math
import threading

from astrocore.core.ayanamsa import DEFAULT_STRATEGY, AyanamsaStrategy, precession_between
from astrocore.core.chart import cast_chart, find_cross_aspects, house_of
from astrocore.core.constants import (
    CONVERGENCE_THRESHOLD_DEG,
    DEFAULT_ORB_DEG,
    LUNAR_SIDEREAL_D,
    MAX_ITERATIONS,
    SOLAR_HALF_WINDOW_D,
    delta_deg,
    is_finite,
    wrap_deg,
)
from astrocore.core.errors import (
    AstroError,
    ConvergenceError,
    DomainAssumptionViolation,
    InvalidInputError,
    SearchCancelled,
)
from astrocore.core.positions import BODY_MODELS
from astrocore.core.time_kernel import to_civil, to_instant
from astrocore.core.types import (
    AngularPosition,
    Aspect,
    Body,
    BodyModel,
    ChartSnapshot,
    EphemerisSnapshot,
    Instant,
    Location,
    NatalReferencePoint,
    ReturnEvent,
    ReturnStatus,
)

log = logging.getLogger(__name__)

__all__ = [
    "find_return",
    "natal_reference",
    "solar_return",
    "lunar_return",
    "cast_return_chart",
    "ReturnChart",
]

CancelFlag = Union[Callable[[], bool], threading.Event]


# ───────────────────────────── Helpers ────────────────────────────────
def _resolve_model(body: Union[Body, BodyModel, str]) -> BodyModel:
    if isinstance(body, BodyModel):
        return body
    return BODY_MODELS[Body.parse(body)]


def _cancel_requested(cancel: Optional[CancelFlag]) -> bool:
    if cancel is None:
        return False
    is_set = getattr(cancel, "is_set", None)   # threading.Event
    if callable(is_set):
        return bool(is_set())
    return bool(cancel())


def _sidereal(model: BodyModel, strategy: AyanamsaStrategy, t: float) -> float:
    return wrap_deg(float(model.longitude(t)) - strategy.correction(t))


def _unwrapped_progress(lon: float, reference: float, sign: int, mean_advance: float) -> float:
    """
    Degrees travelled since the window start, not folded into [0, 360).

    The wrapped progress is unfolded onto the branch nearest the mean-motion
    advance, so a body whose true rate exceeds its mean rate may pass 360
    inside a one-cycle window without the bracket jumping back to 0.
    """
    wrapped = wrap_deg(sign * (lon - reference))
    return mean_advance + delta_deg(mean_advance, wrapped)


# ───────────────────────────── Solver ─────────────────────────────────
def find_return(
    body: Union[Body, BodyModel, str],
    target_sidereal_longitude: float,
    window_start: float,
    window_length_days: float,
    ayanamsa_strategy: AyanamsaStrategy = DEFAULT_STRATEGY,
    *,
    tolerance_deg: float = CONVERGENCE_THRESHOLD_DEG,
    max_iterations: int = MAX_ITERATIONS,
    cancel: Optional[CancelFlag] = None,
) -> ReturnEvent:
    """
    Bisect ``[window_start, window_start + window_length_days]`` for the
    instant the body's sidereal longitude equals the target.

    Exactly ``max_iterations`` midpoint evaluations are made at most (plus one
    reference evaluation at the window start). ``cancel`` is polled once per
    iteration, before the evaluation.
    """
    try:
        model = _resolve_model(body)
    except InvalidInputError as exc:
        return ReturnEvent(
            status=ReturnStatus.INVALID_INPUT,
            body=str(body),
            target_deg=math.nan,
            window_start=math.nan,
            window_length_days=math.nan,
            error=exc,
        )

    def _failed(status: ReturnStatus, error: AstroError, **extra: Any) -> ReturnEvent:
        return ReturnEvent(
            status=status,
            body=model.name,
            target_deg=float(target_sidereal_longitude) if is_finite(target_sidereal_longitude) else math.nan,
            window_start=float(window_start) if is_finite(window_start) else math.nan,
            window_length_days=float(window_length_days) if is_finite(window_length_days) else math.nan,
            error=error,
            **extra,
        )

    # ── validation: fail fast, no clamping
    if not is_finite(target_sidereal_longitude):
        return _failed(
            ReturnStatus.INVALID_INPUT,
            InvalidInputError(f"target longitude must be finite, got {target_sidereal_longitude!r}"),
        )
    if not is_finite(window_start):
        return _failed(
            ReturnStatus.INVALID_WINDOW,
            InvalidInputError(f"window start must be finite, got {window_start!r}"),
        )
    if not is_finite(window_length_days) or float(window_length_days) <= 0.0:
        return _failed(
            ReturnStatus.INVALID_WINDOW,
            InvalidInputError(f"window length must be a positive number of days, got {window_length_days!r}"),
        )
    if not is_finite(tolerance_deg) or float(tolerance_deg) <= 0.0:
        return _failed(
            ReturnStatus.INVALID_INPUT,
            InvalidInputError(f"tolerance_deg must be positive, got {tolerance_deg!r}"),
        )
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, int) or max_iterations < 1:
        return _failed(
            ReturnStatus.INVALID_INPUT,
            InvalidInputError(f"max_iterations must be a positive integer, got {max_iterations!r}"),
        )

    start = float(window_start)
    length = float(window_length_days)
    if length > model.cycle_days:
        log.warning(
            "return search for %s refused: window %.6f d exceeds one cycle (%.6f d)",
            model.name, length, model.cycle_days,
        )
        return _failed(
            ReturnStatus.DOMAIN_VIOLATION,
            DomainAssumptionViolation(
                f"{model.name}: window of {length} days exceeds one apparent cycle "
                f"({model.cycle_days:.6f} days); bisection needs monotonic motion",
                window_days=length,
                cycle_days=model.cycle_days,
            ),
        )

    target = wrap_deg(float(target_sidereal_longitude))
    tol = float(tolerance_deg)
    sign = model.direction
    rate = abs(model.mean_rate_deg_per_day)

    reference = _sidereal(model, strategy=ayanamsa_strategy, t=start)
    target_progress = wrap_deg(sign * (target - reference))

    lo, hi = start, start + length
    sep: Optional[float] = None
    for i in range(1, max_iterations + 1):
        if _cancel_requested(cancel):
            log.debug("return search for %s cancelled after %d iterations", model.name, i - 1)
            return _failed(
                ReturnStatus.CANCELLED,
                SearchCancelled(f"{model.name} return search cancelled", iterations=i - 1),
                separation_deg=sep,
                iterations=i - 1,
            )

        mid = 0.5 * (lo + hi)
        lon = _sidereal(model, ayanamsa_strategy, mid)
        sep = delta_deg(target, lon)

        if abs(sep) < tol:
            log.debug(
                "%s return converged at JD %.8f after %d iterations (|Δλ|=%.3e°)",
                model.name, mid, i, abs(sep),
            )
            return ReturnEvent(
                status=ReturnStatus.CONVERGED,
                body=model.name,
                target_deg=target,
                window_start=start,
                window_length_days=length,
                instant=Instant(mid),
                separation_deg=abs(sep),
                iterations=i,
            )

        if _unwrapped_progress(lon, reference, sign, rate * (mid - start)) < target_progress:
            lo = mid
        else:
            hi = mid

    log.warning(
        "%s return not found within %d iterations (last Δλ=%.6f°)",
        model.name, max_iterations, sep,
    )
    return _failed(
        ReturnStatus.EXCEEDED_ITERATIONS,
        ConvergenceError(
            f"{model.name}: no convergence to {tol}° within {max_iterations} iterations",
            last_separation_deg=sep,
            iterations=max_iterations,
        ),
        separation_deg=sep,
        iterations=max_iterations,
    )


# ───────────────────────────── Convenience ────────────────────────────
def natal_reference(
    body: Union[Body, str],
    instant: float,
    strategy: AyanamsaStrategy = DEFAULT_STRATEGY,
) -> NatalReferencePoint:
    """Record a body's sidereal longitude at birth as a return target."""
    b = Body.parse(body)
    jd = Instant(instant)
    return NatalReferencePoint(body=b, target=AngularPosition(_sidereal(BODY_MODELS[b], strategy, jd)))


def solar_return(
    natal_instant: float,
    return_year: int,
    strategy: AyanamsaStrategy = DEFAULT_STRATEGY,
    *,
    half_window_days: float = SOLAR_HALF_WINDOW_D,
    tolerance_deg: float = CONVERGENCE_THRESHOLD_DEG,
    max_iterations: int = MAX_ITERATIONS,
    cancel: Optional[CancelFlag] = None,
) -> ReturnEvent:
    """
    Sun's return to its natal sidereal longitude in ``return_year``.

    The window is centred on the civil anniversary of the birth moment
    (Feb 29 rolls over to Mar 1 in common years).
    """
    ref = natal_reference(Body.SUN, natal_instant, strategy)
    birth = to_civil(natal_instant)
    anniversary = to_instant(return_year, birth.month, birth.day, birth.hour, birth.minute, birth.second)
    half = float(half_window_days)
    return find_return(
        Body.SUN,
        ref.target,
        anniversary - half,
        2.0 * half,
        strategy,
        tolerance_deg=tolerance_deg,
        max_iterations=max_iterations,
        cancel=cancel,
    )


def lunar_return(
    natal_instant: float,
    search_start: float,
    strategy: AyanamsaStrategy = DEFAULT_STRATEGY,
    *,
    window_days: float = LUNAR_SIDEREAL_D,
    tolerance_deg: float = CONVERGENCE_THRESHOLD_DEG,
    max_iterations: int = MAX_ITERATIONS,
    cancel: Optional[CancelFlag] = None,
) -> ReturnEvent:
    """First Moon return to its natal sidereal longitude within one sidereal month of ``search_start``."""
    ref = natal_reference(Body.MOON, natal_instant, strategy)
    return find_return(
        Body.MOON,
        ref.target,
        search_start,
        window_days,
        strategy,
        tolerance_deg=tolerance_deg,
        max_iterations=max_iterations,
        cancel=cancel,
    )


@dataclass(frozen=True)
class ReturnChart:
    """
    Solver outcome plus the chart cast at the return instant.

    ``chart`` is None unless the search converged. The natal comparisons are
    filled only when a natal ephemeris was supplied:

    - ``natal_aspects``: return body (``a``) to natal body (``b``) aspects
    - ``natal_houses``: the return-chart house each natal body falls in
    - ``precession_deg``: ayanamsa drift from the natal to the return instant
    """
    event: ReturnEvent
    chart: Optional[ChartSnapshot] = None
    natal: Optional[EphemerisSnapshot] = None
    natal_aspects: Tuple[Aspect, ...] = ()
    natal_houses: Tuple[Tuple[Body, int], ...] = ()
    precession_deg: Optional[float] = None

    def natal_house(self, body: Union[Body, str]) -> int:
        key = Body.parse(body)
        for b, house in self.natal_houses:
            if b is key:
                return house
        raise KeyError(key.value)

    def aspects_to_natal(self, body: Union[Body, str]) -> Tuple[Aspect, ...]:
        """Return-chart aspects made to one natal body."""
        key = Body.parse(body)
        return tuple(a for a in self.natal_aspects if a.b is key)


def cast_return_chart(
    reference: NatalReferencePoint,
    window_start: float,
    window_length_days: float,
    location: Location,
    strategy: AyanamsaStrategy = DEFAULT_STRATEGY,
    *,
    natal: Optional[EphemerisSnapshot] = None,
    house_system: str = "equal",
    orb_deg: float = DEFAULT_ORB_DEG,
    tolerance_deg: float = CONVERGENCE_THRESHOLD_DEG,
    max_iterations: int = MAX_ITERATIONS,
    cancel: Optional[CancelFlag] = None,
) -> ReturnChart:
    if natal is not None and not isinstance(natal, EphemerisSnapshot):
        raise InvalidInputError(f"natal must be an EphemerisSnapshot, got {type(natal).__name__}")

    event = find_return(
        reference.body,
        reference.target,
        window_start,
        window_length_days,
        strategy,
        tolerance_deg=tolerance_deg,
        max_iterations=max_iterations,
        cancel=cancel,
    )
    if not event.converged:
        return ReturnChart(event=event, natal=natal)

    log.info(
        "casting %s return chart at JD %.6f for (%.4f, %.4f)",
        reference.body.value, float(event.instant), location.latitude, location.longitude,
    )
    chart = cast_chart(
        event.instant,
        location,
        strategy,
        house_system=house_system,
        orb_deg=orb_deg,
    )
    if natal is None:
        return ReturnChart(event=event, chart=chart)

    houses = tuple((b, house_of(lon, chart.houses)) for b, lon in natal.items())
    precession = precession_between(natal.instant, event.instant, strategy)
    aspects = find_cross_aspects(chart.ephemeris, natal, orb_deg)
    log.debug(
        "%s return vs natal: %d aspects, precession %.6f°",
        reference.body.value, len(aspects), precession,
    )
    return ReturnChart(
        event=event,
        chart=chart,
        natal=natal,
        natal_aspects=aspects,
        natal_houses=houses,
        precession_deg=precession,
    )
