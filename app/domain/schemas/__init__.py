"""Pydantic schemas for API request/response."""

from app.domain.schemas.user import (
    RegisterRequest,
    UpdateUserRequest,
    UserListResponse,
    UserResponse,
)

__all__ = [
    "RegisterRequest",
    "UpdateUserRequest",
    "UserListResponse",
    "UserResponse",
]
