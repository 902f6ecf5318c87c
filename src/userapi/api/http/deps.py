"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.userapi.api.http.app_data import ApplicationDependencies
from src.userapi.entities.user import SqlUserRepository, UserRepository


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    """Get the dependencies built at startup."""
    return request.app.state.app_dependencies


def get_db_session(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> Iterator[Session]:
    """Yield a session for the duration of one request."""
    session = app_deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_user_repository(session: Session = Depends(get_db_session)) -> UserRepository:
    """Get the user repository bound to the request's session."""
    return SqlUserRepository(session)
