"""Unit-of-work protocol: a transactional scope that yields a UserRepository."""

from typing import AsyncContextManager, Protocol

from app.application.user_repository import UserRepository


class UnitOfWork(Protocol):
    """
    Calling it opens a transaction. Leaving the block normally commits;
    leaving it with an exception rolls back and re-raises.

        async with unit_of_work() as users:
            ...
    """

    def __call__(self) -> AsyncContextManager[UserRepository]: ...
