"""
Star-planet simulation with orbital period detection and ellipse fitting.

Each call to ``TwoBodySystem.step`` advances the bodies by a fixed number of
physics sub-steps. The planet position is sampled once per simulated day and,
whenever the star-to-planet angle wraps from +pi to -pi, a full orbit is
declared complete: the period is measured, an ellipse is fitted through the
samples of that orbit and the samples are cleared.

Units and conventions
- Positions in meters [m], velocities in [m/s], masses in [kg], times in [s].
- All values exposed here are raw SI; conversion to AU or days belongs to the
  caller (see simulation.units).

Threading
- An instance is not safe for concurrent step() calls; the host owns the
  cadence and simply stops calling step() to pause.
"""
import logging
import math
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from classical_integrators.base_integrator import BaseIntegrator
from classical_integrators.body import Body
from classical_integrators.semi_implicit_euler import SemiImplicitEuler
from orbit_fitting.conic_fit import ConicFitter, fit_conic
from orbit_fitting.ellipse import EllipseFit, extract_ellipse
from orbit_fitting.errors import InsufficientSamplesError, NotAnEllipseError, OrbitFitError
from vector_math import vec2
from .config import SimulationConfig
from .errors import InvalidConfigurationError

logger = logging.getLogger(__name__)


class FitStatus(Enum):
    """Outcome of the most recent ellipse fit."""
    PENDING = 'pending'
    FITTED = 'fitted'
    NOT_AN_ELLIPSE = 'not_an_ellipse'
    INSUFFICIENT_SAMPLES = 'insufficient_samples'


def swept_areas(focus: np.ndarray, samples: Sequence[np.ndarray]) -> Tuple[float, ...]:
    """
    Areas of the triangles (focus, sample_i, sample_i+1).

    For samples taken at equal time intervals these are equal by Kepler's
    second law.

    Args:
        focus: Position of the attracting body
        samples: Consecutive positions of the orbiting body
    Returns:
        Tuple of len(samples) - 1 areas in m^2
    """
    areas = []
    for p1, p2 in zip(samples[:-1], samples[1:]):
        ax, ay = p1[0] - focus[0], p1[1] - focus[1]
        bx, by = p2[0] - focus[0], p2[1] - focus[1]
        areas.append(0.5 * abs(ax * by - ay * bx))
    return tuple(float(area) for area in areas)


class TwoBodySystem:
    """
    Two-body integrator with period detection and per-orbit ellipse fits.

    The simulation owns both bodies once constructed; their position
    histories follow the retention policy of the config.
    """

    def __init__(
        self,
        star: Body,
        planet: Body,
        config: Optional[SimulationConfig] = None,
        fitter: Optional[ConicFitter] = None,
        integrator: Optional[BaseIntegrator] = None
    ):
        """
        Initialize the system.

        Args:
            star: Central body
            planet: Orbiting body whose positions are sampled and fitted
            config: Simulation parameters (defaults to SimulationConfig())
            fitter: Callable returning conic coefficients for a point set
                (defaults to the direct least-squares fit)
            integrator: Integrator used for the sub-steps (defaults to
                semi-implicit Euler with the config's G)
        Raises:
            InvalidConfigurationError: coincident bodies or the same body twice
        """
        self.config = config if config is not None else SimulationConfig()
        if star is planet:
            raise InvalidConfigurationError("star and planet must be distinct bodies")
        separation = vec2.distance(star.position, planet.position)
        if not math.isfinite(separation) or separation <= 0:
            raise InvalidConfigurationError(
                f"Initial separation must be positive and finite, got {separation}"
            )

        self.star = star
        self.planet = planet
        for body in (star, planet):
            body.history_limit = self.config.history_limit
            body.history_trim = self.config.history_trim

        self.time_step = self.config.time_step
        self.sub_steps_per_call = self.config.sub_steps_per_call
        self.integrator = integrator if integrator is not None else SemiImplicitEuler(
            G=self.config.gravitational_constant
        )
        self._fit_conic = fitter if fitter is not None else fit_conic

        # scratch
        self._separation = vec2.create()

        initial_angle = self._separation_angle()
        self._previous_previous_angle = initial_angle
        self._previous_angle = initial_angle
        self._current_angle = initial_angle

        self._world_time = 0.0
        self._previous_time = 0.0
        self._sample_bucket = 0
        self._previous_period_time = 0.0
        self._period = 0.0

        self._orbital_samples: List[np.ndarray] = []
        self.ellipse_fit = EllipseFit()
        self.fit_status = FitStatus.PENDING
        self.fit_stale = False
        self.last_fit_error: Optional[OrbitFitError] = None
        self.periods_completed = 0
        self.interval_areas: Tuple[float, ...] = ()

    @property
    def world_time(self) -> float:
        """Simulated time in seconds."""
        return self._world_time

    @property
    def period(self) -> float:
        """Most recently measured orbital period in seconds (0 until the first orbit)."""
        return self._period

    @property
    def orbital_samples(self) -> Tuple[np.ndarray, ...]:
        """Planet positions sampled since the last period completion."""
        return tuple(vec2.clone(p) for p in self._orbital_samples)

    @property
    def angle_history(self) -> Tuple[float, float, float]:
        """(current, previous, previous-previous) star-to-planet angles."""
        return self._current_angle, self._previous_angle, self._previous_previous_angle

    def step(self) -> int:
        """
        Advance the simulation by ``sub_steps_per_call`` physics sub-steps.

        Returns:
            Number of orbital periods completed during this call
        """
        completed = 0
        for _ in range(self.sub_steps_per_call):
            if self._sub_step():
                completed += 1
        return completed

    def state_is_finite(self) -> bool:
        """False once NaN or infinite values have entered the body state."""
        return self.star.is_finite() and self.planet.is_finite() and math.isfinite(self._world_time)

    def _separation_angle(self) -> float:
        vec2.subtract(self.planet.position, self.star.position, out=self._separation)
        return math.atan2(self._separation[1], self._separation[0])

    def _sub_step(self) -> bool:
        self.integrator.step(self.star, self.planet, self.time_step)

        self._previous_time = self._world_time
        self._world_time += self.time_step

        self._previous_previous_angle = self._previous_angle
        self._previous_angle = self._current_angle
        self._current_angle = self._separation_angle()

        # Integer day buckets avoid missed or duplicated samples from
        # floating point accumulation of world time.
        bucket = math.floor(self._world_time / self.config.sample_interval)
        if bucket > self._sample_bucket:
            self._sample_bucket = bucket
            self._orbital_samples.append(vec2.clone(self.planet.position))
            self.planet.record_position()
            self.star.record_position()

        # The angle wraps from near +pi to near -pi once per orbit
        if (self._previous_angle < self._previous_previous_angle
                and self._previous_angle < self._current_angle):
            self._complete_period()
            return True
        return False

    def _complete_period(self) -> None:
        self._period = self._previous_time - self._previous_period_time
        self._previous_period_time = self._previous_time
        self.periods_completed += 1

        samples = self._orbital_samples
        try:
            self.ellipse_fit = self._fit_samples(samples)
        except InsufficientSamplesError as e:
            self._keep_previous_fit(FitStatus.INSUFFICIENT_SAMPLES, e)
        except NotAnEllipseError as e:
            self._keep_previous_fit(FitStatus.NOT_AN_ELLIPSE, e)
        else:
            self.fit_status = FitStatus.FITTED
            self.fit_stale = False
            self.last_fit_error = None
            logger.info(
                f"Orbit {self.periods_completed}: period {self._period:.6e} s, "
                f"semi-major axis {self.ellipse_fit.a:.6e} m, "
                f"eccentricity {self.ellipse_fit.eccentricity:.6f}"
            )

        self.interval_areas = swept_areas(self.star.position, samples)
        if self.interval_areas and logger.isEnabledFor(logging.DEBUG):
            areas = np.array(self.interval_areas)
            mean = areas.mean()
            spread = areas.std() / mean if mean > 0 else 0.0
            logger.debug(
                f"Swept areas over {len(areas)} intervals: mean {mean:.6e} m^2, "
                f"relative spread {spread:.3e}"
            )

        self._orbital_samples = []

    def _fit_samples(self, samples: List[np.ndarray]) -> EllipseFit:
        if len(samples) < self.config.min_fit_samples:
            raise InsufficientSamplesError(len(samples), self.config.min_fit_samples)
        coefficients = self._fit_conic(samples)
        return extract_ellipse(coefficients, epsilon=self.config.theta_epsilon)

    def _keep_previous_fit(self, status: FitStatus, error: OrbitFitError) -> None:
        self.fit_status = status
        self.fit_stale = True
        self.last_fit_error = error
        logger.warning(
            f"Orbit {self.periods_completed}: period {self._period:.6e} s, "
            f"ellipse fit unavailable ({error}); keeping previous fit"
        )
