import math
from typing import List, Sequence

import numpy as np

from vector_math import vec2
from simulation.errors import InvalidConfigurationError

HISTORY_LIMIT = 2000
HISTORY_TRIM = 200


class Body:
    """
    A point mass moving in the plane.

    Units: mass in kg, position in m, velocity in m/s, acceleration in m/s^2.
    The position history is a bounded trail of past positions: once it grows
    past ``history_limit`` entries the oldest ``history_trim`` are dropped.
    """

    def __init__(
        self,
        mass: float,
        position: Sequence[float] = (0.0, 0.0),
        velocity: Sequence[float] = (0.0, 0.0),
        name: str = 'body',
        history_limit: int = HISTORY_LIMIT,
        history_trim: int = HISTORY_TRIM
    ):
        """
        Initialize the body.

        Args:
            mass: Mass in kilograms (must be positive and finite)
            position: Initial (x, y) position in meters
            velocity: Initial (vx, vy) velocity in meters per second
            name: Label used in logs and plots
            history_limit: Maximum number of stored past positions
            history_trim: Number of oldest positions dropped when the limit is exceeded
        """
        mass = float(mass)
        if not math.isfinite(mass) or mass <= 0:
            raise InvalidConfigurationError(f"Body '{name}' must have a positive mass, got {mass}")
        if history_trim < 1 or history_limit < history_trim:
            raise InvalidConfigurationError(
                f"History policy needs 1 <= trim <= limit, got limit={history_limit}, trim={history_trim}"
            )
        self._mass = mass
        self.name = name
        self.position = vec2.from_values(position[0], position[1])
        self.velocity = vec2.from_values(velocity[0], velocity[1])
        self.acceleration = vec2.create()
        self.history_limit = history_limit
        self.history_trim = history_trim
        self._position_history: List[np.ndarray] = []

    @property
    def mass(self) -> float:
        return self._mass

    @property
    def position_history(self) -> List[np.ndarray]:
        return self._position_history

    @property
    def momentum(self) -> np.ndarray:
        return vec2.scale(self.velocity, self._mass)

    @property
    def kinetic_energy(self) -> float:
        return 0.5 * self._mass * vec2.length_squared(self.velocity)

    def advance(self, acceleration: np.ndarray, dt: float) -> None:
        """
        Semi-implicit Euler step: update the velocity first, then move the
        position with the already-updated velocity.

        Args:
            acceleration: Acceleration applied during the step (may be self.acceleration)
            dt: Time step in seconds; not validated
        """
        vec2.assign(self.acceleration, acceleration[0], acceleration[1])
        vec2.add_scaled(self.velocity, self.acceleration, dt, out=self.velocity)
        vec2.add_scaled(self.position, self.velocity, dt, out=self.position)

    def record_position(self) -> None:
        """Append a copy of the current position to the history."""
        self._position_history.append(vec2.clone(self.position))
        if len(self._position_history) > self.history_limit:
            del self._position_history[:self.history_trim]

    def is_finite(self) -> bool:
        return bool(
            np.all(np.isfinite(self.position))
            and np.all(np.isfinite(self.velocity))
            and np.all(np.isfinite(self.acceleration))
        )

    def __repr__(self) -> str:
        return (f"Body(name={self.name!r}, mass={self._mass:.6e}, "
                f"position=({self.position[0]:.6e}, {self.position[1]:.6e}), "
                f"velocity=({self.velocity[0]:.6e}, {self.velocity[1]:.6e}))")
