"""Domain layer: models, schemas, validators, exceptions. Pure business logic only."""

from app.domain.exceptions import (
    DomainError,
    DomainValidationError,
    InvalidPasswordError,
    InvalidUsernameError,
)
from app.domain.models import User, mask_username
from app.domain.schemas import (
    RegisterRequest,
    UpdateUserRequest,
    UserListResponse,
    UserResponse,
)
from app.domain.validators import (
    validate_password,
    validate_register_request,
    validate_update_request,
    validate_username,
)

__all__ = [
    "DomainError",
    "DomainValidationError",
    "InvalidPasswordError",
    "InvalidUsernameError",
    "RegisterRequest",
    "UpdateUserRequest",
    "User",
    "UserListResponse",
    "UserResponse",
    "mask_username",
    "validate_password",
    "validate_register_request",
    "validate_update_request",
    "validate_username",
]
