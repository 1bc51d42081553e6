# astrocore/core/errors.py
from __future__ import annotations
"""
Error taxonomy shared by every core module.

Each error carries a stable machine-readable ``code`` and renders as
``"<code>: <message>"`` so callers can log or map it without string parsing.
"""
from typing import Optional

__all__ = [
    "AstroError",
    "InvalidInputError",
    "ConvergenceError",
    "DomainAssumptionViolation",
    "SearchCancelled",
]


class AstroError(ValueError):
    code = "astro_error"

    def __init__(self, message: str, code: Optional[str] = None):
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(f"{self.code}: {message}")


class InvalidInputError(AstroError):
    """Out-of-domain parameter (non-finite number, latitude outside ±90, empty window, ...)."""
    code = "invalid_input"


class ConvergenceError(AstroError):
    """The return solver used its whole iteration budget without meeting the tolerance."""
    code = "convergence_failed"

    def __init__(self, message: str, *, last_separation_deg: float, iterations: int):
        self.last_separation_deg = float(last_separation_deg)
        self.iterations = int(iterations)
        super().__init__(message)


class DomainAssumptionViolation(AstroError):
    """Search window too long for the body's apparent motion; bisection would be unsound."""
    code = "domain_assumption"

    def __init__(self, message: str, *, window_days: float, cycle_days: float):
        self.window_days = float(window_days)
        self.cycle_days = float(cycle_days)
        super().__init__(message)


class SearchCancelled(AstroError):
    code = "cancelled"

    def __init__(self, message: str, *, iterations: int):
        self.iterations = int(iterations)
        super().__init__(message)
