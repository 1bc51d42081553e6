# astrocore/utils/config.py
from __future__ import annotations

"""
Caller-side engine configuration.

The core never reads files or the environment; callers build an
``EngineConfig`` (defaults, or a YAML file via ``load_config``) and pass its
values into the core calls explicitly.

YAML example:

    tolerance_deg: 0.0001
    max_iterations: 50
    orb_deg: 8.0
    house_system: whole_sign
    ayanamsa: lahiri
    ayanamsa_precision: accumulated
    solar_half_window_days: 5.0
    lunar_window_days: 27.321582
"""

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping

import yaml

from astrocore.core.ayanamsa import AyanamsaStrategy, get_strategy
from astrocore.core.chart import normalize_house_system
from astrocore.core.constants import (
    CONVERGENCE_THRESHOLD_DEG,
    DEFAULT_ORB_DEG,
    LUNAR_SIDEREAL_D,
    MAX_ITERATIONS,
    SOLAR_HALF_WINDOW_D,
    is_finite,
)
from astrocore.core.errors import InvalidInputError

__all__ = ["EngineConfig", "DEFAULT_CONFIG", "load_config", "config_from_mapping"]


@dataclass(frozen=True)
class EngineConfig:
    tolerance_deg: float = CONVERGENCE_THRESHOLD_DEG
    max_iterations: int = MAX_ITERATIONS
    orb_deg: float = DEFAULT_ORB_DEG
    house_system: str = "equal"
    ayanamsa: str = "lahiri"
    ayanamsa_precision: str = "accumulated"
    solar_half_window_days: float = SOLAR_HALF_WINDOW_D
    lunar_window_days: float = LUNAR_SIDEREAL_D

    def __post_init__(self) -> None:
        for name in ("tolerance_deg", "solar_half_window_days", "lunar_window_days"):
            v = getattr(self, name)
            if not is_finite(v) or float(v) <= 0.0:
                raise InvalidInputError(f"{name} must be a positive number, got {v!r}")
            object.__setattr__(self, name, float(v))
        if not is_finite(self.orb_deg) or float(self.orb_deg) < 0.0:
            raise InvalidInputError(f"orb_deg must be a non-negative number, got {self.orb_deg!r}")
        object.__setattr__(self, "orb_deg", float(self.orb_deg))
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, int) or self.max_iterations < 1:
            raise InvalidInputError(f"max_iterations must be a positive integer, got {self.max_iterations!r}")
        object.__setattr__(self, "house_system", normalize_house_system(self.house_system))
        # resolve once so a bad preset fails at load time, not mid-search
        get_strategy(self.ayanamsa, self.ayanamsa_precision)

    def strategy(self) -> AyanamsaStrategy:
        return get_strategy(self.ayanamsa, self.ayanamsa_precision)

    def solver_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``find_return`` / ``solar_return`` / ``lunar_return``."""
        return {"tolerance_deg": self.tolerance_deg, "max_iterations": self.max_iterations}

    def chart_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``cast_chart`` / ``cast_return_chart``."""
        return {"house_system": self.house_system, "orb_deg": self.orb_deg}

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = EngineConfig()


def config_from_mapping(data: Mapping[str, Any]) -> EngineConfig:
    """Overlay ``data`` on the defaults; unknown keys are rejected."""
    if not isinstance(data, Mapping):
        raise InvalidInputError(f"config must be a mapping, got {type(data).__name__}")
    known = {f.name for f in fields(EngineConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise InvalidInputError(f"unknown config keys: {', '.join(map(str, unknown))}")
    return replace(DEFAULT_CONFIG, **dict(data))


def load_config(path: str) -> EngineConfig:
    """Load an EngineConfig from a YAML file (an empty file gives the defaults)."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return config_from_mapping(data)
