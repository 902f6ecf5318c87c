"""User data access layer.

``UserRepository`` is the boundary the HTTP handlers depend on;
``SqlUserRepository`` is its implementation over the ``users`` table. Every
operation is a single statement, and writes are committed immediately, so
each call is atomic on its own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

import pydantic
from loguru import logger
from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from src.userapi.core.exceptions import NotFoundError, StorageError

from .entity import User
from .table import UserTable


class UserRepository(ABC):
    """Operations the service needs from a user store.

    Failures of the store surface as :class:`StorageError`; a missing row on
    update or delete surfaces as :class:`NotFoundError`.
    """

    @abstractmethod
    def create(self, user: User) -> User:
        """Persist ``user`` and set the store-assigned id on it."""

    @abstractmethod
    def get_by_id(self, user_id: int) -> User | None:
        """Return the user, or ``None`` when no row has that id."""

    @abstractmethod
    def update(self, user: User) -> None:
        """Replace every field except the id of an existing user."""

    @abstractmethod
    def delete(self, user_id: int) -> None:
        """Remove a user."""

    @abstractmethod
    def list(self) -> list[User]:
        """Return all users in store order."""


class SqlUserRepository(UserRepository):
    """Relational implementation backed by a SQLModel session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    @contextmanager
    def _storage_errors(self, message: str) -> Iterator[None]:
        try:
            yield
        except (SQLAlchemyError, pydantic.ValidationError) as e:
            self._session.rollback()
            logger.error("{}: {}", message, e)
            raise StorageError(message, e) from e

    def create(self, user: User) -> User:
        logger.info("Creating user with email: {}", user.email)
        row = UserTable(
            name=user.name,
            age=user.age,
            phone_number=user.phone_number,
            email=user.email,
        )
        with self._storage_errors("failed to create user"):
            self._session.add(row)
            self._session.flush()
            user_id = row.id
            self._session.commit()

        user.id = user_id
        logger.info("Successfully created user with ID: {}", user_id)
        return user

    def get_by_id(self, user_id: int) -> User | None:
        logger.debug("Fetching user with ID: {}", user_id)
        statement = select(UserTable).where(UserTable.id == user_id)
        with self._storage_errors("failed to fetch user"):
            row = self._session.exec(statement).first()
            if row is None:
                logger.info("User not found with ID: {}", user_id)
                return None
            user = User.model_validate(row, from_attributes=True)

        logger.debug("Successfully fetched user with ID: {}", user_id)
        return user

    def update(self, user: User) -> None:
        logger.info("Updating user with ID: {}", user.id)
        statement = (
            update(UserTable)
            .where(UserTable.id == user.id)
            .values(
                name=user.name,
                age=user.age,
                phone_number=user.phone_number,
                email=user.email,
            )
        )
        with self._storage_errors("failed to update user"):
            rows_affected = self._session.exec(statement).rowcount
            self._session.commit()

        if rows_affected == 0:
            logger.info("No user found to update with ID: {}", user.id)
            raise NotFoundError(user.id)
        logger.info("Successfully updated user with ID: {}", user.id)

    def delete(self, user_id: int) -> None:
        logger.info("Deleting user with ID: {}", user_id)
        statement = delete(UserTable).where(UserTable.id == user_id)
        with self._storage_errors("failed to delete user"):
            rows_affected = self._session.exec(statement).rowcount
            self._session.commit()

        if rows_affected == 0:
            logger.info("No user found to delete with ID: {}", user_id)
            raise NotFoundError(user_id)
        logger.info("Successfully deleted user with ID: {}", user_id)

    def list(self) -> list[User]:
        logger.debug("Fetching all users")
        with self._storage_errors("failed to fetch users"):
            rows = self._session.exec(select(UserTable)).all()
            users = [User.model_validate(row, from_attributes=True) for row in rows]

        logger.debug("Successfully fetched {} users", len(users))
        return users
