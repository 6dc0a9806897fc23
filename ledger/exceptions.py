"""Domain-specific exceptions for the ledger core."""

class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class RecordNotFoundError(LookupError):
    """Raised when a transaction cannot be located."""


class PersistenceError(IOError):
    """Raised when the persistence layer cannot read or write the ledger."""
