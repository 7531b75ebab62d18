"""Domain models. Pure business entities."""

from app.domain.models.user import User, mask_username

__all__ = [
    "User",
    "mask_username",
]
