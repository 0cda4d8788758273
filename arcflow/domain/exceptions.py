"""Domain-specific exceptions. Pure domain layer, no infrastructure."""


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when extracted transfer parameters cannot be sanitized into an intent."""


class InvalidStatusTransitionError(DomainError):
    """Raised when a risk status transition is not allowed."""
