"""Validators for user domain rules. Pure functions, no infrastructure or DB access."""

import re
from typing import Optional

from app.domain.exceptions import InvalidPasswordError, InvalidUsernameError
from app.domain.schemas.user import USERNAME_PATTERN, RegisterRequest, UpdateUserRequest

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 50

_USERNAME_RE = re.compile(USERNAME_PATTERN)


def validate_username(username: str) -> None:
    """Usernames end up in lock keys, so they are restricted to a safe ASCII set."""
    if not username or not (USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH):
        raise InvalidUsernameError(
            f"username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters"
        )
    if not _USERNAME_RE.match(username):
        raise InvalidUsernameError("username may contain only letters, digits, '_', '.', '-'")


def validate_password(password: Optional[str]) -> None:
    if password is None:
        return
    if not (PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH):
        raise InvalidPasswordError(
            f"password must be {PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LENGTH} characters"
        )


def validate_register_request(request: RegisterRequest) -> None:
    """Validate registration input. Raises domain exceptions on violation."""
    validate_username(request.username)
    validate_password(request.password)


def validate_update_request(request: UpdateUserRequest) -> None:
    """Empty password means "unchanged" and is not validated."""
    if request.password:
        validate_password(request.password)
