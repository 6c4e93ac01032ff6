import numpy as np

from classical_integrators.base_integrator import GRAVITATIONAL_CONSTANT
from classical_integrators.body import Body
from simulation.units import AU_TO_M, EARTH_MASS, SUN_MASS


def _balance_momentum(star, planet):
    # Give the star the recoil velocity so the barycenter stays at rest
    star.velocity[:] = -(planet.mass * planet.velocity) / star.mass


def generate_two_body_system(radius_au=1.0, star_mass=SUN_MASS, planet_mass=EARTH_MASS,
                             G=GRAVITATIONAL_CONSTANT):
    """
    Generate initial conditions for a circular two-body orbit (e.g., Earth-Sun).
    Uses SI units; the planet starts on the +x axis moving in +y.

    Args:
        radius_au (float): Orbital radius in astronomical units
        star_mass (float): Mass of the star in kg
        planet_mass (float): Mass of the planet in kg
        G (float): Gravitational constant

    Returns:
        tuple: (star, planet) Body instances
    """
    r = radius_au * AU_TO_M
    # For circular orbit: v = sqrt(GM/r)
    v = np.sqrt(G * star_mass / r)

    star = Body(mass=star_mass, name='Sun')
    planet = Body(mass=planet_mass, position=(r, 0.0), velocity=(0.0, v), name='Planet')
    _balance_momentum(star, planet)
    return star, planet


def generate_eccentric_orbit(radius_au=1.5, speed_factor=1.2, star_mass=SUN_MASS,
                             planet_mass=EARTH_MASS, G=GRAVITATIONAL_CONSTANT):
    """
    Generate initial conditions for an eccentric two-body orbit.

    The planet starts at periapsis with a tangential speed scaled from the
    circular speed; factors between 1 and sqrt(2) give bound ellipses.

    Args:
        radius_au (float): Starting distance in astronomical units
        speed_factor (float): Multiple of the circular orbit speed

    Returns:
        tuple: (star, planet) Body instances
    """
    r = radius_au * AU_TO_M
    v = speed_factor * np.sqrt(G * star_mass / r)

    star = Body(mass=star_mass, name='Sun')
    planet = Body(mass=planet_mass, position=(r, 0.0), velocity=(0.0, v), name='Planet')
    _balance_momentum(star, planet)
    return star, planet


def generate_launch_orbit(radius_au, speed, angle_deg, star_mass=SUN_MASS,
                          planet_mass=EARTH_MASS):
    """
    Place the planet on the +x axis with an arbitrary launch velocity.

    Args:
        radius_au (float): Starting distance in astronomical units
        speed (float): Launch speed in m/s
        angle_deg (float): Launch direction in degrees from +x

    Returns:
        tuple: (star, planet) Body instances; the star starts at rest
    """
    angle = np.radians(angle_deg)
    star = Body(mass=star_mass, name='Sun')
    planet = Body(
        mass=planet_mass,
        position=(radius_au * AU_TO_M, 0.0),
        velocity=(np.cos(angle) * speed, np.sin(angle) * speed),
        name='Planet',
    )
    return star, planet


def circular_period(radius_au=1.0, star_mass=SUN_MASS, planet_mass=EARTH_MASS,
                    G=GRAVITATIONAL_CONSTANT):
    """Kepler's third law period in seconds for a circular orbit of the given radius."""
    r = radius_au * AU_TO_M
    return 2 * np.pi * np.sqrt(r ** 3 / (G * (star_mass + planet_mass)))
