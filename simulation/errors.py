class InvalidConfigurationError(ValueError):
    """Simulation parameters that can never produce a valid two-body run."""
    pass


class NonFiniteStateError(RuntimeError):
    """Body state contains NaN or infinite values after a step."""
    pass
