"""
Two-body simulation with per-orbit ellipse fitting.

Import from the submodules directly, e.g. ``simulation.two_body_system``.
"""
