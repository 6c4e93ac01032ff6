from vector_math import vec2
from .base_integrator import BaseIntegrator, GRAVITATIONAL_CONSTANT
from .body import Body


class Euler(BaseIntegrator):
    """
    Explicit Euler integrator for the two-body problem.

    Kept as a baseline: positions move with the old velocities, which makes
    orbital energy grow steadily.
    """

    def __init__(self, G: float = GRAVITATIONAL_CONSTANT):
        """
        Initialize the Euler integrator.

        Args:
            G: Gravitational constant (default: SI value in m^3 kg^-1 s^-2)
        """
        super().__init__(G=G)

    def step(self, star: Body, planet: Body, dt: float) -> None:
        """
        Perform one explicit Euler step.

        Args:
            star: First body (modified in place)
            planet: Second body (modified in place)
            dt: Time step in seconds
        """
        # Compute accelerations
        self.compute_acceleration(star, planet)
        # Update positions with the old velocities, then the velocities
        for body in (planet, star):
            vec2.add_scaled(body.position, body.velocity, dt, out=body.position)
            vec2.add_scaled(body.velocity, body.acceleration, dt, out=body.velocity)
