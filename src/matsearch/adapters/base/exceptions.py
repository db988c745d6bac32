"""Adapter-specific exceptions."""


class AdapterError(Exception):
    """Base exception for adapter errors."""


class ProviderUnavailableError(AdapterError):
    """Raised when a provider is not configured to answer (e.g. no credential)."""


class ProviderFaultError(AdapterError):
    """Raised when a provider answers badly: error status, transport failure, malformed body."""


class DatasetLoadError(AdapterError):
    """Raised when the local dataset cannot be read or parsed."""


class ConfigurationError(AdapterError):
    """Raised when adapter configuration is invalid."""
