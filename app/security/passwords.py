"""PBKDF2-HMAC-SHA256 password hashing. Per-password random salt; constant-time verify. No global state."""

import base64
import hmac
import os

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from app.security.exceptions import PasswordHashError

ALGORITHM = "pbkdf2_sha256"
SALT_BYTES = 16
KEY_LENGTH = 32
DEFAULT_ITERATIONS = 390000


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii")


class PasswordHasher:
    """
    Hashes are stored as pbkdf2_sha256$<iterations>$<salt>$<hash> (urlsafe base64),
    so the iteration count can be raised without invalidating existing users.
    """

    def __init__(self, iterations: int = DEFAULT_ITERATIONS) -> None:
        if iterations < 1:
            raise PasswordHashError("iterations must be >= 1")
        self._iterations = iterations

    def hash(self, password: str) -> str:
        salt = os.urandom(SALT_BYTES)
        digest = _derive(password, salt, self._iterations)
        return f"{ALGORITHM}${self._iterations}${_b64(salt)}${_b64(digest)}"

    def verify(self, password: str, encoded: str) -> bool:
        """True if password matches encoded. Raises PasswordHashError on a malformed hash."""
        try:
            algorithm, iterations, salt_b64, digest_b64 = encoded.split("$")
            if algorithm != ALGORITHM:
                raise ValueError(f"unsupported algorithm {algorithm}")
            salt = base64.urlsafe_b64decode(salt_b64.encode("ascii"))
            expected = base64.urlsafe_b64decode(digest_b64.encode("ascii"))
            rounds = int(iterations)
        except ValueError as e:
            raise PasswordHashError(f"Malformed password hash: {e}") from e
        return hmac.compare_digest(_derive(password, salt, rounds), expected)
