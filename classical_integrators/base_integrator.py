import numpy as np
from abc import ABC, abstractmethod
from typing import Tuple

from vector_math import vec2
from .body import Body

GRAVITATIONAL_CONSTANT = 6.674e-11  # N m^2 kg^-2


class BaseIntegrator(ABC):
    """
    Base class for the two-body integrators.

    Owns the gravity model and the scratch vectors used by it, so repeated
    steps do not allocate. An instance must not be shared between threads.
    """

    def __init__(self, G: float = GRAVITATIONAL_CONSTANT):
        """
        Initialize the integrator.

        Args:
            G: Gravitational constant (default: SI value in m^3 kg^-1 s^-2)
        """
        self.G = G
        self._separation = vec2.create()
        self._direction = vec2.create()

    def integrate(
        self,
        star: Body,
        planet: Body,
        dt: float,
        n_steps: int
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Integrate the system for a given number of steps.

        Args:
            star: First body (modified in place)
            planet: Second body (modified in place)
            dt: Time step in seconds
            n_steps: Number of integration steps
        Returns:
            Tuple of (positions, velocities, energies); positions and velocities
            have shape (n_steps + 1, 2, 2) ordered [star, planet]
        """
        positions = [np.array([star.position, planet.position])]
        velocities = [np.array([star.velocity, planet.velocity])]
        energies = [self.compute_energy(star, planet)]

        for _ in range(n_steps):
            self.step(star, planet, dt)
            positions.append(np.array([star.position, planet.position]))
            velocities.append(np.array([star.velocity, planet.velocity]))
            energies.append(self.compute_energy(star, planet))
        return np.array(positions), np.array(velocities), np.array(energies)

    @abstractmethod
    def step(self, star: Body, planet: Body, dt: float) -> None:
        """
        Advance both bodies by one time step (to be implemented by subclasses).

        Args:
            star: First body (modified in place)
            planet: Second body (modified in place)
            dt: Time step in seconds
        """
        pass

    def compute_acceleration(self, star: Body, planet: Body) -> float:
        """
        Compute the mutual gravitational acceleration of the two bodies.

        The force magnitude is F = G * m_star * m_planet / r^2. Each body is
        accelerated by F / m along the line joining them, towards the other
        body, so the two momentum changes cancel exactly. The results are
        written into ``star.acceleration`` and ``planet.acceleration``.

        Coincident bodies (r = 0) give non-finite accelerations; they are not
        guarded against here.

        Args:
            star: First body
            planet: Second body
        Returns:
            The separation distance r in meters
        """
        # star -> planet
        vec2.subtract(planet.position, star.position, out=self._separation)
        r = vec2.length(self._separation)
        vec2.normalize(self._separation, out=self._direction)

        with np.errstate(divide='ignore', invalid='ignore'):
            force = np.float64(self.G * star.mass * planet.mass) / np.float64(r * r)

        vec2.scale(self._direction, force / star.mass, out=star.acceleration)
        vec2.scale(self._direction, -force / planet.mass, out=planet.acceleration)
        return r

    def compute_energy(self, star: Body, planet: Body) -> float:
        """
        Compute total energy (kinetic + potential) of the system.

        Args:
            star: First body
            planet: Second body
        Returns:
            Total energy in joules
        """
        kinetic = star.kinetic_energy + planet.kinetic_energy
        r = vec2.distance(star.position, planet.position)
        potential = -self.G * star.mass * planet.mass / r
        return kinetic + potential

    def compute_momentum(self, star: Body, planet: Body) -> np.ndarray:
        """
        Compute total linear momentum of the system.

        Returns:
            (2,) array in kg m/s
        """
        return star.momentum + planet.momentum

    def compute_angular_momentum(self, star: Body, planet: Body) -> float:
        """
        Compute the z component of total angular momentum about the origin.

        Returns:
            Angular momentum in kg m^2/s
        """
        total = 0.0
        for body in (star, planet):
            total += body.mass * (body.position[0] * body.velocity[1]
                                  - body.position[1] * body.velocity[0])
        return float(total)
