"""Security-layer exceptions. Typed, no HTTP."""


class SecurityError(Exception):
    """Base for all security-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PasswordHashError(SecurityError):
    """Raised when a stored password hash cannot be parsed or hashing is misconfigured."""
