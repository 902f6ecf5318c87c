"""Stand-in repositories for handler tests."""

from __future__ import annotations

from src.userapi.core.exceptions import NotFoundError, StorageError
from src.userapi.entities.user import User, UserRepository


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self.users: dict[int, User] = {}
        self._next_id = 1

    def create(self, user: User) -> User:
        user.id = self._next_id
        self._next_id += 1
        self.users[user.id] = user.model_copy()
        return user

    def get_by_id(self, user_id: int) -> User | None:
        user = self.users.get(user_id)
        return user.model_copy() if user is not None else None

    def update(self, user: User) -> None:
        if user.id not in self.users:
            raise NotFoundError(user.id)
        self.users[user.id] = user.model_copy()

    def delete(self, user_id: int) -> None:
        if self.users.pop(user_id, None) is None:
            raise NotFoundError(user_id)

    def list(self) -> list[User]:
        return [user.model_copy() for user in self.users.values()]


class FailingUserRepository(UserRepository):
    """Every call fails the way a lost database connection would."""

    cause = ConnectionError("connection refused by 10.0.0.5:3306")

    def _fail(self, message: str):
        raise StorageError(message, self.cause) from self.cause

    def create(self, user: User) -> User:
        self._fail("failed to create user")

    def get_by_id(self, user_id: int) -> User | None:
        self._fail("failed to fetch user")

    def update(self, user: User) -> None:
        self._fail("failed to update user")

    def delete(self, user_id: int) -> None:
        self._fail("failed to delete user")

    def list(self) -> list[User]:
        self._fail("failed to fetch users")
