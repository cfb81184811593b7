class ConfigurationError(ValueError):
    """Raised when simulation parameters are out of range."""


class PolicyContractError(RuntimeError):
    """A priority policy returned an order that would starve eligible cases."""
