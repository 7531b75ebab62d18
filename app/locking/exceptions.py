"""Lock-layer exceptions. Typed, no HTTP. Messages never include tokens."""


class LockError(Exception):
    """Base for all lock-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class LockContentionError(LockError):
    """Raised when the key is currently held by another token. Recoverable."""

    def __init__(self, key: str, attempts: int = 1) -> None:
        self.key = key
        self.attempts = attempts
        super().__init__(f"Lock {key} is held by another owner (attempts={attempts})")


class LockTimeoutError(LockError):
    """Raised when the acquire deadline elapsed before the lock was obtained."""

    def __init__(self, key: str, timeout: float) -> None:
        self.key = key
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout}s waiting for lock {key}")


class LockMismatchError(LockError):
    """Raised on release/refresh when the stored token is absent or belongs to someone else."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Lock {key} is no longer owned by this caller (expired or re-acquired)")


class LockNotAcquiredError(LockError):
    """Raised when release/refresh is called without a token from a successful acquire."""


class LockNotHeldError(LockError):
    """Raised by a TTL query when the key is absent."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Lock {key} is not held")


class StoreUnavailableError(LockError):
    """Raised when the backing store cannot be reached. Never treated as contention."""
