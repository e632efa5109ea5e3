"""Configuration errors."""

from src.domain.exceptions import GovernanceError


class InvalidConfigurationError(GovernanceError, ValueError):
    """Raised when governance configuration values are out of range."""

    error_code = "INVALID_CONFIGURATION"
