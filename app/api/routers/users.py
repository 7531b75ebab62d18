"""Users API router. Register and update run under distributed locks inside UserService."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from app.api.dependencies import get_user_service
from app.application.user_service import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, UserService
from app.domain.schemas.user import (
    RegisterRequest,
    UpdateUserRequest,
    UserListResponse,
    UserResponse,
)
from app.domain.validators.user_validator import (
    validate_register_request,
    validate_update_request,
)

router = APIRouter()


@router.post("/", response_model=UserResponse, status_code=201)
async def register_user(
    body: RegisterRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Register a user. 409 if the username is taken, 429 if a concurrent registration holds it."""
    validate_register_request(body)
    return await user_service.register(body)


@router.get("/", response_model=UserListResponse)
async def list_users(
    user_service: Annotated[UserService, Depends(get_user_service)],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
):
    return await user_service.list_users(page=page, page_size=page_size)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    return await user_service.get_user(user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UpdateUserRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Update nickname and/or password under the per-user lock."""
    validate_update_request(body)
    return await user_service.update_user(user_id, body)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: int,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Soft delete."""
    await user_service.delete_user(user_id)
    return Response(status_code=204)
