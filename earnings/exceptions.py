"""Domain-specific exceptions for the earnings ledger core."""

class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class PersistenceError(IOError):
    """Raised when the persistence layer encounters unrecoverable issues."""
