"""
Ellipse fitting for sampled orbits.
"""

from .errors import OrbitFitError, NotAnEllipseError, InsufficientSamplesError
from .ellipse import ConicCoefficients, EllipseFit, extract_ellipse
from .conic_fit import ConicFitter, fit_conic, MIN_CONIC_POINTS

__all__ = [
    'OrbitFitError',
    'NotAnEllipseError',
    'InsufficientSamplesError',
    'ConicCoefficients',
    'EllipseFit',
    'extract_ellipse',
    'ConicFitter',
    'fit_conic',
    'MIN_CONIC_POINTS',
]
