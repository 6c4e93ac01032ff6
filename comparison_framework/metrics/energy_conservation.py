import numpy as np
from .base_metric import BaseMetric


def relative_energy_error(energies):
    """(E(t) - E(0)) / |E(0)| for a sequence of total energies."""
    energies = np.asarray(energies, dtype=np.float64)
    return (energies - energies[0]) / np.abs(energies[0])


class EnergyConservation(BaseMetric):
    """How far the total energy of a run wanders from its starting value."""

    def __init__(self):
        super().__init__("Energy Conservation", unit="relative RMS")

    def compute(self, run):
        """
        Args:
            run (dict): Needs ``energies``, total energy recorded after each step() call

        Returns:
            float: RMS of the relative energy error
        """
        error = relative_energy_error(run['energies'])
        return float(np.sqrt(np.mean(error ** 2)))

    def compute_drift(self, run):
        """
        Secular energy trend of a run.

        A symplectic integrator oscillates around zero while explicit Euler
        drifts steadily upwards.

        Args:
            run (dict): Needs ``energies`` and the matching ``times`` in seconds

        Returns:
            float: Slope of the relative energy error per second
        """
        slope, _ = np.polyfit(np.asarray(run['times']), relative_energy_error(run['energies']), 1)
        return float(slope)
