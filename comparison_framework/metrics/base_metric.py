from abc import ABC, abstractmethod


class BaseMetric(ABC):
    """
    A scalar quality score for one experiment run.

    Scores are stored per run label (usually the integrator name) so several
    runs of the same scenario can be compared side by side. Lower is better.
    """

    def __init__(self, name, unit=""):
        self.name = name
        self.unit = unit
        self.results = {}

    @abstractmethod
    def compute(self, run):
        """
        Score a run.

        Args:
            run (dict): Output of experiments.experiment_utils.run_experiment

        Returns:
            float: Metric value
        """
        pass

    def evaluate(self, label, run):
        """Compute the metric for a run and store it under ``label``."""
        value = self.compute(run)
        self.add_result(label, value)
        return value

    def add_result(self, label, value):
        self.results[label] = value

    def get_results(self):
        return dict(self.results)

    def best(self):
        """Label with the lowest stored score, or None when nothing is stored."""
        if not self.results:
            return None
        return min(self.results, key=self.results.get)

    def reset(self):
        self.results = {}

    def format_results(self):
        """Table of stored scores, one run per line."""
        header = f"{self.name} ({self.unit})" if self.unit else self.name
        lines = [header, "-" * 40]
        for label, value in self.results.items():
            lines.append(f"{label:20s}: {value:10.3e}")
        return "\n".join(lines)

    def print_results(self):
        print(self.format_results())
