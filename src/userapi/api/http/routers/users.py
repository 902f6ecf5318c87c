"""User API router with CRUD operations.

The path id and the request body are decoded by dependencies, so a bad id
is reported before the body is read. Every failure is raised as an
``HTTPException`` and rendered as ``{"error": "..."}``.
"""

import re

import pydantic
from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger
from starlette.responses import Response

from src.userapi.api.http.deps import get_user_repository
from src.userapi.api.http.responses import ErrorResponse
from src.userapi.core.exceptions import (
    MalformedRequestError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from src.userapi.entities.user import User, UserRepository

router = APIRouter(prefix="/users", tags=["users"])

_USER_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
_MAX_USER_ID = 2**63 - 1

_USER_BODY = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"schema": User.model_json_schema()}},
    }
}


def parse_user_id(raw: str) -> int:
    """Parse a path segment as a signed 64-bit user id."""
    if not _USER_ID_PATTERN.fullmatch(raw):
        raise MalformedRequestError("Invalid user ID")
    user_id = int(raw)
    if not -_MAX_USER_ID - 1 <= user_id <= _MAX_USER_ID:
        raise MalformedRequestError("Invalid user ID")
    return user_id


def _describe(error: pydantic.ValidationError) -> str:
    parts = []
    for detail in error.errors(include_url=False):
        location = ".".join(str(piece) for piece in detail["loc"])
        parts.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    return "; ".join(parts)


def path_user_id(user_id: str) -> int:
    try:
        return parse_user_id(user_id)
    except MalformedRequestError as e:
        raise HTTPException(status_code=400, detail=e.message) from e


async def user_from_body(request: Request) -> User:
    """Decode the request body into a :class:`User`."""
    body = await request.body()
    try:
        return User.model_validate_json(body)
    except pydantic.ValidationError as e:
        logger.warning("Error decoding request body: {}", e)
        raise HTTPException(
            status_code=400, detail=f"Invalid request payload: {_describe(e)}"
        ) from e


def check_user(user: User) -> None:
    try:
        user.check()
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message) from e


@router.post(
    "",
    status_code=201,
    response_model=User,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    openapi_extra=_USER_BODY,
)
def create_user(
    user: User = Depends(user_from_body),
    repository: UserRepository = Depends(get_user_repository),
) -> User:
    """Create a new user; the store assigns its id."""
    user.id = None
    check_user(user)

    try:
        repository.create(user)
    except StorageError as e:
        logger.error("Error creating user: {}", e)
        raise HTTPException(status_code=500, detail="Error creating user") from e

    logger.info("Successfully created user with ID: {}", user.id)
    return user


@router.get(
    "/{user_id}",
    response_model=User,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def get_user(
    user_id: int = Depends(path_user_id),
    repository: UserRepository = Depends(get_user_repository),
) -> User:
    """Get a user by id."""
    try:
        user = repository.get_by_id(user_id)
    except StorageError as e:
        logger.error("Error retrieving user with ID {}: {}", user_id, e)
        raise HTTPException(status_code=500, detail="Error retrieving user") from e

    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.put(
    "/{user_id}",
    response_model=User,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    openapi_extra=_USER_BODY,
)
def update_user(
    user_id: int = Depends(path_user_id),
    user: User = Depends(user_from_body),
    repository: UserRepository = Depends(get_user_repository),
) -> User:
    """Replace a user's fields; the id always comes from the path."""
    user.id = user_id
    check_user(user)

    try:
        repository.update(user)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="User not found") from e
    except StorageError as e:
        logger.error("Error updating user with ID {}: {}", user_id, e)
        raise HTTPException(status_code=500, detail="Error updating user") from e

    logger.info("Successfully updated user with ID: {}", user_id)
    return user


@router.delete(
    "/{user_id}",
    status_code=204,
    response_class=Response,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def delete_user(
    user_id: int = Depends(path_user_id),
    repository: UserRepository = Depends(get_user_repository),
) -> Response:
    """Delete a user."""
    try:
        repository.delete(user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="User not found") from e
    except StorageError as e:
        logger.error("Error deleting user with ID {}: {}", user_id, e)
        raise HTTPException(status_code=500, detail="Error deleting user") from e

    logger.info("Successfully deleted user with ID: {}", user_id)
    return Response(status_code=204)


@router.get(
    "",
    response_model=list[User],
    responses={500: {"model": ErrorResponse}},
)
def list_users(
    repository: UserRepository = Depends(get_user_repository),
) -> list[User]:
    """List all users."""
    try:
        users = repository.list()
    except StorageError as e:
        logger.error("Error retrieving users list: {}", e)
        raise HTTPException(status_code=500, detail="Error retrieving users") from e

    logger.info("Successfully retrieved {} users", len(users))
    return users
