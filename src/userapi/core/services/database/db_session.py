"""Database engine and session factory used across the application."""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import StaticPool, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, create_engine

from src.userapi.core.exceptions import DatabaseConnectionError
from src.userapi.runtime.config.config_data import DatabaseConfig


class DbSessionService:
    """Owns the process-wide engine and its bounded connection pool."""

    def __init__(self, db_config: DatabaseConfig):
        """Initialize the shared database engine and session factory."""
        self._config = db_config

        logger.info(
            "Initializing database engine for {}", db_config.safe_connection_string
        )
        self._engine = create_engine(
            db_config.connection_string, **self._get_engine_kwargs(db_config)
        )

    @property
    def engine(self):
        return self._engine

    def _get_engine_kwargs(self, db_config: DatabaseConfig) -> dict[str, Any]:
        """Pool and driver settings for the configured backend."""
        engine_kwargs: dict[str, Any] = {
            "pool_pre_ping": True,  # Validate connections before use
            "echo": False,
        }

        if db_config.is_sqlite:
            engine_kwargs["connect_args"] = {
                "check_same_thread": False,
                "timeout": 20,  # Lock timeout
            }
            if make_url(db_config.connection_string).database in (None, "", ":memory:"):
                # One shared connection, otherwise every checkout sees an empty database
                engine_kwargs["poolclass"] = StaticPool
            return engine_kwargs

        engine_kwargs.update(
            {
                "pool_size": db_config.pool_size,
                "max_overflow": db_config.max_overflow,
                "pool_timeout": db_config.pool_timeout,
                "pool_recycle": db_config.pool_recycle,
            }
        )
        return engine_kwargs

    def connect(self) -> None:
        """Wait until the database answers, giving up after the configured attempts."""
        attempts = self._config.connect_retries
        last_error: SQLAlchemyError | None = None

        for attempt in range(1, attempts + 1):
            logger.info(
                "Attempting to connect to database (attempt {}/{})...", attempt, attempts
            )
            try:
                with self._engine.connect() as connection:
                    connection.execute(text("SELECT 1"))
            except SQLAlchemyError as e:
                last_error = e
                logger.warning("Failed to ping database: {}", e)
                if attempt < attempts:
                    time.sleep(self._config.connect_retry_delay)
                continue

            logger.info("Successfully connected to database")
            return

        raise DatabaseConnectionError(attempts, last_error) from last_error

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(self._engine, expire_on_commit=False)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Context manager style helper for repositories and tests."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Database transaction failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except SQLAlchemyError as e:
            logger.error(
                "Database health check failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

    def get_pool_status(self) -> dict:
        """Get current connection pool status for monitoring."""
        pool = self._engine.pool
        return {
            "size": getattr(pool, "size", lambda: 0)(),
            "checked_in": getattr(pool, "checkedin", lambda: 0)(),
            "checked_out": getattr(pool, "checkedout", lambda: 0)(),
            "overflow": getattr(pool, "overflow", lambda: 0)(),
        }

    def dispose(self) -> None:
        """Close every pooled connection."""
        logger.info("Closing database connections")
        self._engine.dispose()
