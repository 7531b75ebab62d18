"""Domain-specific exceptions. Pure domain layer. No infrastructure."""


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when domain validation rules are violated."""


class InvalidUsernameError(DomainValidationError):
    """Raised when a username is empty, too long, or has characters outside the allowed set."""


class InvalidPasswordError(DomainValidationError):
    """Raised when a password does not meet length rules."""
