"""
Direct least-squares ellipse fitting.

Implements the numerically stable variant of Fitzgibbon's direct method
(Halir & Flusser, 1998): minimise the algebraic distance sum of
(A x^2 + B xy + C y^2 + D x + E y + F)^2 under the ellipse constraint
4AC - B^2 = 1. The design matrix is split into quadratic and linear parts so
the constrained eigenproblem stays 3x3.

Orbital coordinates are of order 1e11 m, so the points are centered and
scaled to unit size before fitting and the coefficients are mapped back to
the original frame afterwards.
"""
from typing import Callable, Sequence

import numpy as np

from .ellipse import ConicCoefficients
from .errors import InsufficientSamplesError, NotAnEllipseError

MIN_CONIC_POINTS = 5

# Callable contract for pluggable fitters
ConicFitter = Callable[[Sequence[np.ndarray]], ConicCoefficients]


def _normalize_points(points: np.ndarray):
    center = points.mean(axis=0)
    spread = np.abs(points - center).max()
    if not spread > 0:
        raise NotAnEllipseError("All sample points coincide")
    return (points - center) / spread, center, spread


def _fit_normalized(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    D1 = np.column_stack([x * x, x * y, y * y])
    D2 = np.column_stack([x, y, np.ones_like(x)])
    S1 = D1.T @ D1
    S2 = D1.T @ D2
    S3 = D2.T @ D2
    if np.linalg.matrix_rank(D2) < 3:
        raise NotAnEllipseError("Sample points are collinear")
    try:
        T = -np.linalg.solve(S3, S2.T)
    except np.linalg.LinAlgError as exc:
        raise NotAnEllipseError("Sample points are collinear") from exc

    M = S1 + S2 @ T
    # Premultiply by the inverse of the constraint matrix [[0, 0, 2], [0, -1, 0], [2, 0, 0]]
    M = np.array([M[2] / 2.0, -M[1], M[0] / 2.0])
    eigvals, eigvecs = np.linalg.eig(M)
    eigvals = np.real(eigvals)
    eigvecs = np.real(eigvecs)

    cond = 4 * eigvecs[0] * eigvecs[2] - eigvecs[1] ** 2
    candidates = np.flatnonzero(cond > 0)
    if candidates.size == 0:
        raise NotAnEllipseError("No ellipse-constrained solution for the sample points")
    best = candidates[np.argmin(np.abs(eigvals[candidates]))]

    quadratic = eigvecs[:, best]
    linear = T @ quadratic
    return np.concatenate([quadratic, linear])


def fit_conic(points: Sequence[np.ndarray]) -> ConicCoefficients:
    """
    Fit a general conic (constrained to an ellipse) through a set of 2D points.

    Args:
        points: Sequence of (x, y) points, at least five
    Returns:
        ConicCoefficients in the frame of the input points
    Raises:
        InsufficientSamplesError: fewer than five points
        NotAnEllipseError: degenerate point sets (coincident or collinear)
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if len(pts) < MIN_CONIC_POINTS:
        raise InsufficientSamplesError(len(pts), MIN_CONIC_POINTS)

    normalized, center, spread = _normalize_points(pts)
    a, b, c, d, e, f = _fit_normalized(normalized[:, 0], normalized[:, 1])

    # Substitute u = (x - cx) / s, v = (y - cy) / s and multiply through by s^2
    cx, cy = center
    s = spread
    return ConicCoefficients(
        a=float(a),
        b=float(b),
        c=float(c),
        d=float(d * s - 2 * a * cx - b * cy),
        e=float(e * s - 2 * c * cy - b * cx),
        f=float(a * cx * cx + b * cx * cy + c * cy * cy - d * s * cx - e * s * cy + f * s * s),
    )
