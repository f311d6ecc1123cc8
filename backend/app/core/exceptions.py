"""Domain errors raised by the customer service layer.

The API layer translates these into HTTP responses (see ``app.api.errors``).
Validation failures (``NotFound``, ``InvalidReference``, ``DuplicateEntity``)
share the ``ValidationFailure`` base: they are expected and recoverable by the
caller. ``StorageFailure`` sits beside it and means the persistence layer
misbehaved.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all service-level errors."""


class ValidationFailure(DomainError):
    """The caller's input was rejected; storage is healthy."""


class NotFound(ValidationFailure):
    """The requested customer, shop or channel does not exist."""

    def __init__(self, entity: str, key: Any):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} with ID {key} not found")


class InvalidReference(ValidationFailure):
    """A write referenced a shop or channel that could not be resolved."""

    def __init__(self, kind: str, ref_id: Any):
        self.kind = kind
        self.ref_id = ref_id
        super().__init__(f"{kind.capitalize()} with ID {ref_id} not found")


class DuplicateEntity(ValidationFailure):
    """Another customer already holds the (platform, external_id) pair."""

    def __init__(self, platform: str, external_id: str):
        self.platform = platform
        self.external_id = external_id
        super().__init__(
            f"Customer with platform '{platform}' and external ID '{external_id}' already exists"
        )


class StorageFailure(DomainError):
    """Unexpected persistence failure on a write path.

    The original exception is kept as ``cause`` and chained as ``__cause__``.
    """

    def __init__(self, operation: str, cause: BaseException):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Failed to {operation}: {cause}")


__all__ = [
    "DomainError",
    "ValidationFailure",
    "NotFound",
    "InvalidReference",
    "DuplicateEntity",
    "StorageFailure",
]
