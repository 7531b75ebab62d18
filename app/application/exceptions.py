"""Application-layer exceptions. Do not reuse domain or lock exceptions."""


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UsernameTakenError(ApplicationError):
    """Raised when a live user already has the requested username."""


class UserNotFoundError(ApplicationError):
    """Raised when no live user has the requested id."""


class ResourceBusyError(ApplicationError):
    """Raised when the resource lock could not be obtained in time. Clients should retry later."""


class DependencyUnavailableError(ApplicationError):
    """Raised when a backing dependency (e.g. the lock store) is unreachable."""
