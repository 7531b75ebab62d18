"""Pydantic schemas for the user API. Strict validation, no DB or infrastructure."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.domain.models.user import User

USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class RegisterRequest(BaseModel):
    """Request schema for registering a user."""

    username: str = Field(..., min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    password: str = Field(..., min_length=6, max_length=50)
    nickname: Optional[str] = Field(None, max_length=50)


class UpdateUserRequest(BaseModel):
    """Partial update. Fields left as None (or empty) are not changed."""

    nickname: Optional[str] = Field(None, max_length=50)
    password: Optional[str] = Field(None, max_length=50)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    """Public view of a user. Username is masked; no password material."""

    id: int
    username: str
    nickname: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.masked_username,
            nickname=user.nickname,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserListResponse(BaseModel):
    items: List[UserResponse]
    total: int
    page: int
    page_size: int
