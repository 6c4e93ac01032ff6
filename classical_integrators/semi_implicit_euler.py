from .base_integrator import BaseIntegrator, GRAVITATIONAL_CONSTANT
from .body import Body


class SemiImplicitEuler(BaseIntegrator):
    """
    Semi-implicit (symplectic) Euler integrator for the two-body problem.

    Velocities are kicked first and positions drift with the new velocities.
    Both accelerations are evaluated before either body moves. Energy stays
    bounded on oscillatory orbits, unlike explicit Euler.
    """

    def __init__(self, G: float = GRAVITATIONAL_CONSTANT):
        super().__init__(G=G)

    def step(self, star: Body, planet: Body, dt: float) -> None:
        """
        Perform one semi-implicit Euler step.

        Args:
            star: First body (modified in place)
            planet: Second body (modified in place)
            dt: Time step in seconds
        """
        self.compute_acceleration(star, planet)
        planet.advance(planet.acceleration, dt)
        star.advance(star.acceleration, dt)
