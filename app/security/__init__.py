"""Security: password hashing. No FastAPI."""

from app.security.passwords import PasswordHasher

__all__ = [
    "PasswordHasher",
]
