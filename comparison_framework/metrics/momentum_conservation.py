import numpy as np
from .base_metric import BaseMetric


class MomentumConservation(BaseMetric):
    """Metric to measure conservation of total linear momentum."""

    def __init__(self):
        super().__init__("Momentum Conservation", unit="relative max")

    def compute(self, run):
        """
        Compute the largest deviation of total momentum from its initial value.

        Args:
            run (dict): Output of run_experiment
                - velocities (np.ndarray): Shape (n_steps, n_bodies, 2) array
                - masses (np.ndarray): Shape (n_bodies,) array

        Returns:
            float: Max |p(t) - p(0)| divided by the largest single-body momentum
        """
        velocities = np.asarray(run['velocities'])
        masses = np.asarray(run['masses'])

        body_momenta = masses[np.newaxis, :, np.newaxis] * velocities
        total = body_momenta.sum(axis=1)
        scale = np.max(np.linalg.norm(body_momenta, axis=2))
        if scale == 0:
            return 0.0
        deviation = np.linalg.norm(total - total[0], axis=1)
        return float(np.max(deviation) / scale)
