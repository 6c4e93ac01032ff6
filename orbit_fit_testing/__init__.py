"""
Tests for the two-body orbit fit.
"""
