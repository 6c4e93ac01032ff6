"""
Unit conversions for presenting simulation results.

The simulation itself works in SI (meters, seconds, kilograms); these factors
are applied only when reporting or plotting.
"""

# Masses
SUN_MASS = 1.989e30  # kg
EARTH_MASS = 5.972e24  # kg

# Lengths
AU_TO_M = 1.496e11
M_TO_AU = 6.68459e-12

# Times
DAYS_TO_S = 60 * 60 * 24
S_TO_DAYS = 1 / DAYS_TO_S


def meters_to_au(meters: float) -> float:
    return meters * M_TO_AU


def au_to_meters(au: float) -> float:
    return au * AU_TO_M


def seconds_to_days(seconds: float) -> float:
    return seconds * S_TO_DAYS


def days_to_seconds(days: float) -> float:
    return days * DAYS_TO_S
