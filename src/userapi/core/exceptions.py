"""Error taxonomy shared by the entity, repository and HTTP layers.

Each error carries the message that is safe to show to a client. The HTTP
layer decides the status code; nothing below it knows about transports.
"""

from __future__ import annotations


class UserApiError(Exception):
    """Base class for all errors raised by the service."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(UserApiError):
    """A user failed one of the business rules."""


class MalformedRequestError(UserApiError):
    """A request body or path parameter could not be parsed."""


class NotFoundError(UserApiError):
    """No row exists for the requested user id."""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"user not found with ID: {user_id}")
        self.user_id = user_id


class StorageError(UserApiError):
    """The store could not fulfil an operation.

    The driver-level exception is kept on ``cause`` (and chained as
    ``__cause__`` by the raiser) so it can be logged, but it is never sent
    to clients.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"


class DatabaseConnectionError(UserApiError):
    """The store stayed unreachable for every startup attempt."""

    def __init__(self, attempts: int, cause: BaseException | None = None) -> None:
        super().__init__(
            f"could not connect to database after {attempts} attempts: {cause}"
        )
        self.attempts = attempts
        self.cause = cause
