"""
Two-dimensional vector helpers.
"""

from . import vec2

__all__ = ['vec2']
