"""Exception types raised by the cavity solver."""


class AccavityError(Exception):
    """Base class for solver errors."""


class ConfigurationError(AccavityError, ValueError):
    """Invalid solver configuration (raised before any relaxation starts)."""


class RestartFileError(AccavityError, OSError):
    """Restart checkpoint is missing or cannot be parsed."""
