class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced worker, project or record does not exist."""


class ConflictError(DomainError):
    """Raised when a conditional write loses against a concurrent writer."""


class DuplicateActionError(ConflictError):
    """Raised when an idempotency key has already been recorded."""

    def __init__(self, action_id: str):
        super().__init__(f"Action {action_id} already processed")
        self.action_id = action_id


class StorageError(DomainError):
    """Raised when the database is unavailable. Safe to retry."""
