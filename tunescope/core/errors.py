"""Exceptions raised while building static tables and settings."""


class ConfigurationError(ValueError):
    """Malformed static data or settings, detected once at startup."""
