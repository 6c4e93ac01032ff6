import math
from dataclasses import dataclass, asdict
from typing import Any, Dict

from classical_integrators.base_integrator import GRAVITATIONAL_CONSTANT
from classical_integrators.body import HISTORY_LIMIT, HISTORY_TRIM
from orbit_fitting.conic_fit import MIN_CONIC_POINTS
from orbit_fitting.ellipse import THETA_EPSILON
from .errors import InvalidConfigurationError
from .units import DAYS_TO_S


@dataclass(frozen=True)
class SimulationConfig:
    """
    Immutable parameters of a two-body run (SI units).

    Fields:
    - gravitational_constant: G in m^3 kg^-1 s^-2
    - time_step: Simulated seconds per physics sub-step
    - sub_steps_per_call: Physics sub-steps performed by each step() call
    - sample_interval: Simulated seconds between orbital samples (one day)
    - history_limit / history_trim: Retention policy for body position trails
    - min_fit_samples: Samples required before an ellipse fit is attempted
    - theta_epsilon: Zero threshold for the ellipse rotation branches
    """
    gravitational_constant: float = GRAVITATIONAL_CONSTANT
    time_step: float = 60.0
    sub_steps_per_call: int = 1000
    sample_interval: float = float(DAYS_TO_S)
    history_limit: int = HISTORY_LIMIT
    history_trim: int = HISTORY_TRIM
    min_fit_samples: int = MIN_CONIC_POINTS
    theta_epsilon: float = THETA_EPSILON

    def __post_init__(self):
        if not math.isfinite(self.time_step) or self.time_step <= 0:
            raise InvalidConfigurationError(f"time_step must be positive, got {self.time_step}")
        if int(self.sub_steps_per_call) != self.sub_steps_per_call or self.sub_steps_per_call < 1:
            raise InvalidConfigurationError(
                f"sub_steps_per_call must be a positive integer, got {self.sub_steps_per_call}"
            )
        if not math.isfinite(self.sample_interval) or self.sample_interval <= 0:
            raise InvalidConfigurationError(f"sample_interval must be positive, got {self.sample_interval}")
        if not math.isfinite(self.gravitational_constant) or self.gravitational_constant <= 0:
            raise InvalidConfigurationError(
                f"gravitational_constant must be positive, got {self.gravitational_constant}"
            )
        if self.history_trim < 1 or self.history_limit < self.history_trim:
            raise InvalidConfigurationError(
                f"History policy needs 1 <= trim <= limit, got limit={self.history_limit}, trim={self.history_trim}"
            )
        if self.min_fit_samples < MIN_CONIC_POINTS:
            raise InvalidConfigurationError(
                f"min_fit_samples must be at least {MIN_CONIC_POINTS}, got {self.min_fit_samples}"
            )

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'SimulationConfig':
        """Build a config from a dict, ignoring keys that are not config fields."""
        known = {k: v for k, v in values.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
