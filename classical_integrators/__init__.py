"""
Classical integrators package.
"""

from .body import Body
from .base_integrator import BaseIntegrator, GRAVITATIONAL_CONSTANT
from .euler import Euler
from .semi_implicit_euler import SemiImplicitEuler

__all__ = ['Body', 'BaseIntegrator', 'GRAVITATIONAL_CONSTANT', 'Euler', 'SemiImplicitEuler']
