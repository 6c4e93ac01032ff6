"""
Conservation metrics and ready-made two-body scenarios.
"""
