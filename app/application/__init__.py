# Application layer: services that orchestrate domain, locking and infrastructure.

from app.application.exceptions import (
    ApplicationError,
    DependencyUnavailableError,
    ResourceBusyError,
    UsernameTakenError,
    UserNotFoundError,
)
from app.application.unit_of_work import UnitOfWork
from app.application.user_repository import UserRepository
from app.application.user_service import UserService

__all__ = [
    "ApplicationError",
    "DependencyUnavailableError",
    "ResourceBusyError",
    "UnitOfWork",
    "UserNotFoundError",
    "UserRepository",
    "UserService",
    "UsernameTakenError",
]
