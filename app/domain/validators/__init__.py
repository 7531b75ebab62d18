"""Domain validators. Pure functions, no infrastructure."""

from app.domain.validators.user_validator import (
    validate_password,
    validate_register_request,
    validate_update_request,
    validate_username,
)

__all__ = [
    "validate_password",
    "validate_register_request",
    "validate_update_request",
    "validate_username",
]
