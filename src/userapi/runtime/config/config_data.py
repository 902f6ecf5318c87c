"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field
from sqlalchemy.engine import URL, make_url


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    title: str = Field(default="User API", description="API title shown in the docs")
    version: str = Field(default="1.0.0", description="API version")
    host: str = Field(default="0.0.0.0", description="Address the server binds to")
    port: int = Field(default=8080, description="Port the server listens on")

    @property
    def base_url(self) -> str:
        """Construct the base URL from host and port."""
        host = "localhost" if self.host == "0.0.0.0" else self.host
        return f"http://{host}:{self.port}"


class ServerConfig(BaseModel):
    """HTTP server timeouts."""

    idle_timeout: int = Field(
        default=60, description="Keep-alive idle timeout in seconds"
    )


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    driver: str = Field(
        default="mysql+pymysql", description="SQLAlchemy driver name"
    )
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=3306, description="Database port")
    user: str = Field(default="root", description="Database username")
    password: str | None = Field(default="root", description="Database password")
    name: str = Field(default="userdb", description="Database name")
    url: str | None = Field(
        default=None,
        description="Full connection URL; overrides the individual fields when set",
    )
    pool_size: int = Field(default=25, description="Connection pool size")
    max_overflow: int = Field(default=0, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(
        default=300, description="Maximum connection lifetime in seconds"
    )
    connect_retries: int = Field(
        default=10, ge=1, description="Startup connection attempts"
    )
    connect_retry_delay: float = Field(
        default=2.0, ge=0, description="Seconds to wait between connection attempts"
    )
    create_tables: bool = Field(
        default=True, description="Create missing tables on startup"
    )

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the database connection string."""
        if self.url:
            return self.url
        url = URL.create(
            self.driver,
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.name,
        )
        return url.render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.connection_string).get_backend_name() == "sqlite"

    @property
    def safe_connection_string(self) -> str:
        """Connection string with the password masked, for logs."""
        return make_url(self.connection_string).render_as_string(hide_password=True)


class ConfigData(BaseModel):
    """Root configuration model."""

    app: AppConfig = Field(default_factory=AppConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
