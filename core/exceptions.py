# core/exceptions.py

class DomainError(Exception):
    """Base class for domain-level errors."""
    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when data is invalid or the store rejects an update."""


class NotFoundError(DomainError):
    """Raised when an entity is not found."""


class BusinessRuleError(DomainError):
    """Raised when a leveling rule cannot be honoured."""


class ConcurrencyError(DomainError):
    """Raised when optimistic locking detects a stale update."""


class StoreUnavailableError(DomainError):
    """Raised when the entity store cannot be reached. Safe for the caller to retry."""


class AnalysisCancelledError(DomainError):
    """Raised when a leveling analysis is cancelled or runs past its deadline."""
