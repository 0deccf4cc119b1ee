class FactoryGenError(Exception):
    """Base for all factorygen generator-time exceptions."""


class ConfigurationError(FactoryGenError):
    """Raised when generator settings are missing or malformed."""
