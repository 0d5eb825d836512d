"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and HTTP layers can catch them uniformly and display
user-friendly messages.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """Malformed or rule-breaking input.

    ``errors`` holds one message per offending field, e.g.
    ``"products[1].quantity: must be a positive integer"``.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors) if errors else []


class EntityNotFoundError(DomainException):
    """A requested entity does not exist (or is not visible to the caller)."""


class InsufficientStockError(DomainException):
    """A product does not have enough stock for the requested quantity."""

    def __init__(
        self, product_id: str, product_name: str, available: int, requested: int
    ) -> None:
        super().__init__(
            f'Insufficient stock for product "{product_name}". '
            f"Available: {available}, Requested: {requested}"
        )
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested


class AuthenticationError(DomainException):
    """No usable caller identity was supplied."""


class PermissionDeniedError(DomainException):
    """The caller is authenticated but not allowed to do this."""


class WriteConflictError(DomainException):
    """The store rejected a write because a concurrent transaction won.

    Retryable: nothing from the failed session was committed.
    """

    def __init__(
        self, message: str = "The data was modified by a concurrent transaction"
    ) -> None:
        super().__init__(message)


class ConcurrencyConflictError(DomainException):
    """Write conflicts persisted after every retry attempt."""


class OperationTimeoutError(DomainException):
    """The caller's deadline passed before the operation could finish."""
