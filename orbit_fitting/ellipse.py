"""
Geometric ellipse parameters from a general conic equation.

A conic A x^2 + B xy + C y^2 + D x + E y + F = 0 is an ellipse when its
discriminant 4AC - B^2 is positive. The closed-form conversion below gives
the center (h, k), the semi-axes a >= b, the rotation theta of the major
axis in [0, pi) and the eccentricity.
"""
import math
from dataclasses import dataclass

import numpy as np

from .errors import NotAnEllipseError

THETA_EPSILON = 1e-15


@dataclass(frozen=True)
class ConicCoefficients:
    """Coefficients of A x^2 + B xy + C y^2 + D x + E y + F = 0."""
    a: float
    b: float
    c: float
    d: float
    e: float
    f: float

    @property
    def discriminant(self) -> float:
        """4AC - B^2; positive for ellipses."""
        return 4 * self.a * self.c - self.b ** 2

    def evaluate(self, x, y):
        """Algebraic residual of the conic at (x, y); zero on the curve."""
        return (self.a * x * x + self.b * x * y + self.c * y * y
                + self.d * x + self.e * y + self.f)

    def as_array(self) -> np.ndarray:
        return np.array([self.a, self.b, self.c, self.d, self.e, self.f], dtype=np.float64)


@dataclass(frozen=True)
class EllipseFit:
    """
    Best-fit ellipse.

    Fields:
    - h, k: center in meters
    - a, b: semi-major and semi-minor axes in meters
    - theta: rotation of the major axis from +x in radians
    - eccentricity: sqrt(1 - b^2/a^2)
    """
    h: float = 0.0
    k: float = 0.0
    a: float = 0.0
    b: float = 0.0
    theta: float = 0.0
    eccentricity: float = 0.0

    def sample_points(self, n_points: int = 361) -> np.ndarray:
        """
        Points along the ellipse, for plotting.

        Returns:
            (n_points, 2) array, first and last points coincide
        """
        t = np.linspace(0.0, 2 * np.pi, n_points)
        cos_t, sin_t = np.cos(self.theta), np.sin(self.theta)
        x = self.a * np.cos(t)
        y = self.b * np.sin(t)
        return np.column_stack([
            self.h + x * cos_t - y * sin_t,
            self.k + x * sin_t + y * cos_t,
        ])


def _approx_zero(value: float, epsilon: float) -> bool:
    return abs(value) < epsilon


def _rotation(A: float, B: float, C: float, q: float, epsilon: float) -> float:
    # Which eigenvector of the quadratic form carries the major axis
    # depends on the signs of q(A - C) and qB.
    q_a_minus_c = q * A - q * C
    q_b = q * B

    if _approx_zero(q_a_minus_c, epsilon):
        if _approx_zero(q_b, epsilon):
            return 0.0
        if q_b > 0:
            return 0.25 * math.pi
        return 0.75 * math.pi

    half_angle = 0.5 * math.atan(B / (A - C))
    if q_a_minus_c > 0:
        if q_b >= 0:
            return half_angle
        return half_angle + math.pi
    return half_angle + 0.5 * math.pi


def extract_ellipse(coefficients: ConicCoefficients,
                    epsilon: float = THETA_EPSILON) -> EllipseFit:
    """
    Convert conic coefficients into center, semi-axes, rotation and eccentricity.

    Args:
        coefficients: Conic coefficients (any overall scale or sign)
        epsilon: Threshold below which q(A - C) and qB count as zero
    Returns:
        EllipseFit describing the conic
    Raises:
        NotAnEllipseError: if 4AC - B^2 <= 0, or the conic has no real
            ellipse (imaginary or single-point solution set)
    """
    A, B, C = coefficients.a, coefficients.b, coefficients.c
    D, E, F = coefficients.d, coefficients.e, coefficients.f

    delta = 4 * A * C - B ** 2
    if not delta > 0:
        raise NotAnEllipseError(f"Conic discriminant 4AC - B^2 = {delta:.6e} is not positive")

    q = 64 * (F * delta - A * E ** 2 + B * D * E - C * D ** 2) / delta ** 2
    root = math.sqrt(B ** 2 + (A - C) ** 2)
    s = 0.25 * math.sqrt(abs(q) * root)

    major_sq = 2 * abs(q) * root - 2 * q * (A + C)
    if not major_sq > 0 or not math.isfinite(major_sq):
        raise NotAnEllipseError("Conic has no real points (imaginary or point ellipse)")
    a = 0.125 * math.sqrt(major_sq)

    minor_sq = a ** 2 - s ** 2
    if not minor_sq > 0:
        raise NotAnEllipseError("Conic collapses to a line segment (zero semi-minor axis)")
    b = math.sqrt(minor_sq)

    h = (B * E - 2 * D * C) / delta
    k = (B * D - 2 * A * E) / delta

    theta = _rotation(A, B, C, q, epsilon)
    eccentricity = math.sqrt(1 - (b ** 2 / a ** 2))

    return EllipseFit(h=h, k=k, a=a, b=b, theta=theta, eccentricity=eccentricity)
