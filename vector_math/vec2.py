"""
2D vector operations on float64 numpy arrays of shape (2,).

Every vector-valued function takes an optional ``out`` array. When ``out`` is
None a new array is allocated, otherwise the result is written into ``out``
and ``out`` is returned. Components are read before anything is written, so
``out`` may be one of the inputs.
"""
import math
from typing import Optional

import numpy as np


def create() -> np.ndarray:
    """Return a new zero vector."""
    return np.zeros(2, dtype=np.float64)


def from_values(x: float, y: float) -> np.ndarray:
    """Return a new vector with components (x, y)."""
    return np.array([x, y], dtype=np.float64)


def clone(a: np.ndarray) -> np.ndarray:
    """Return a new vector with the same components as a."""
    return np.array([a[0], a[1]], dtype=np.float64)


def assign(out: np.ndarray, x: float, y: float) -> np.ndarray:
    out[0] = x
    out[1] = y
    return out


def _store(out: Optional[np.ndarray], x: float, y: float) -> np.ndarray:
    if out is None:
        return from_values(x, y)
    out[0] = x
    out[1] = y
    return out


def add(a: np.ndarray, b: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
    """a + b"""
    return _store(out, a[0] + b[0], a[1] + b[1])


def subtract(a: np.ndarray, b: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
    """a - b"""
    return _store(out, a[0] - b[0], a[1] - b[1])


def scale(a: np.ndarray, s: float, out: Optional[np.ndarray] = None) -> np.ndarray:
    """a scaled by the scalar s"""
    return _store(out, a[0] * s, a[1] * s)


def add_scaled(a: np.ndarray, b: np.ndarray, s: float,
               out: Optional[np.ndarray] = None) -> np.ndarray:
    """a + b * s"""
    return _store(out, a[0] + b[0] * s, a[1] + b[1] * s)


def negate(a: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
    return _store(out, -a[0], -a[1])


def normalize(a: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Unit vector pointing along a.

    The zero vector has no direction; normalizing it yields non-finite
    components instead of raising.
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        inv_len = np.float64(1.0) / np.float64(length(a))
    return _store(out, a[0] * inv_len, a[1] * inv_len)


def length_squared(a: np.ndarray) -> float:
    x, y = a[0], a[1]
    return float(x * x + y * y)


def length(a: np.ndarray) -> float:
    """Euclidean norm of a."""
    return math.hypot(a[0], a[1])


def distance_squared(a: np.ndarray, b: np.ndarray) -> float:
    x = a[0] - b[0]
    y = a[1] - b[1]
    return float(x * x + y * y)


def distance(a: np.ndarray, b: np.ndarray) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])
