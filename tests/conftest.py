# tests/conftest.py
from __future__ import annotations

"""
Pytest configuration for the astrocore suite.

- Registers Hypothesis profiles for local dev and CI.
- Sanity-checks ERFA availability (runtime dependency and test oracle).
- Adds a 'slow' marker for the end-to-end return searches.
"""

import os
import pytest
from hypothesis import settings, HealthCheck


# ──────────────────────────────────────────────────────────────────────────────
# Hypothesis profiles
# ──────────────────────────────────────────────────────────────────────────────
settings.register_profile(
    "dev",
    settings(
        deadline=None,           # avoid flaky timeouts on slower runners
        max_examples=60,         # fast local runs
        suppress_health_check=[HealthCheck.too_slow],
    ),
)
settings.register_profile(
    "ci",
    settings(
        deadline=None,
        max_examples=120,        # a bit more coverage in CI
        suppress_health_check=[HealthCheck.too_slow],
    ),
)

_profile = (
    "ci"
    if (os.getenv("CI") or os.getenv("GITHUB_ACTIONS"))
    else os.getenv("HYPOTHESIS_PROFILE", "dev")
)
settings.load_profile(_profile)


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "slow: mark test as slow")


def pytest_report_header(config: pytest.Config) -> str:
    return f"Hypothesis profile: '{_profile}'"


# ──────────────────────────────────────────────────────────────────────────────
# Global fixtures
# ──────────────────────────────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def ensure_erfa():
    """
    Fail early if ERFA/pyERFA isn't importable or missing key functions.
    """
    import erfa  # pyERFA exposes the ERFA namespace as 'erfa'
    assert hasattr(erfa, "p06e"), "ERFA.p06e not available"
    assert hasattr(erfa, "cal2jd"), "ERFA.cal2jd not available"
    assert hasattr(erfa, "gmst82"), "ERFA.gmst82 not available"
    assert hasattr(erfa, "obl80"), "ERFA.obl80 not available"
    return erfa


@pytest.fixture(scope="session")
def delhi():
    from astrocore.core.types import Location
    return Location(latitude=28.6139, longitude=77.2090)


@pytest.fixture(scope="session")
def natal_instant():
    """1990-06-15 14:30 UTC."""
    from astrocore.core.time_kernel import to_instant
    return to_instant(1990, 6, 15, 14, 30, 0)
