"""Domain-specific exceptions for expiry resolution."""


class ExpiryError(Exception):
    """Base class for expiry-resolution errors."""


class ProductNameRequiredError(ExpiryError):
    """Raised when a request does not carry a usable product name."""


class OracleUnavailableError(ExpiryError):
    """Raised when the inference oracle cannot produce an estimate."""
