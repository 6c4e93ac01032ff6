"""
Experiment drivers for the two-body orbit fit.
"""
