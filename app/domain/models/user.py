"""Domain model for users. Pure business semantics. No ORM or infrastructure."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


def mask_username(username: str) -> str:
    """
    Hide the middle of a username for display.

    Keeps the first and last character: testuser -> t******r, abc -> a*c, ab -> a*.
    """
    if len(username) <= 1:
        return username
    if len(username) == 2:
        return username[0] + "*"
    return username[0] + "*" * (len(username) - 2) + username[-1]


@dataclass
class User:
    """A registered user. password_hash is never exposed outside the service."""

    id: int
    username: str
    password_hash: str
    nickname: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime] = None
    is_deleted: bool = False

    @property
    def masked_username(self) -> str:
        return mask_username(self.username)
