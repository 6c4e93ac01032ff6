class OrbitFitError(Exception):
    """Base class for failures while fitting an ellipse to orbital samples."""
    pass


class NotAnEllipseError(OrbitFitError):
    """The conic is a parabola, hyperbola or a degenerate/imaginary ellipse."""
    pass


class InsufficientSamplesError(OrbitFitError):
    """Too few samples to determine a general conic."""

    def __init__(self, n_samples: int, required: int):
        super().__init__(
            f"{n_samples} samples collected, at least {required} are needed to fit a conic"
        )
        self.n_samples = n_samples
        self.required = required
