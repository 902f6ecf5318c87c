"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.userapi.api.http.app_data import ApplicationDependencies
from src.userapi.api.http.responses import respond_with_error
from src.userapi.api.http.routers import health, users
from src.userapi.api.utils.app_startup import configure_logging
from src.userapi.core.services import DbManageService, DbSessionService
from src.userapi.runtime.config.config_data import ConfigData
from src.userapi.runtime.context import get_config


# --- Lifecycle hooks ---
async def startup(app: FastAPI) -> None:
    config: ConfigData = app.state.config
    logger.info("Starting up application in {} environment", config.app.environment)

    database_service = DbSessionService(config.database)
    # Fails the startup once the retries are exhausted
    database_service.connect()

    if config.database.create_tables:
        DbManageService(database_service.engine).create_all()

    app.state.app_dependencies = ApplicationDependencies(
        config=config,
        database_service=database_service,
    )


async def shutdown(app: FastAPI) -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies | None = getattr(
        app.state, "app_dependencies", None
    )
    if app_dependencies is not None:
        app_dependencies.database_service.dispose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup(app)
    try:
        yield
    finally:
        await shutdown(app)


# --- Request logging middleware ---
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    start = time.perf_counter()

    with logger.contextualize(
        request_id=request_id, method=request.method, path=request.url.path
    ):
        logger.info("Started {} {}", request.method, request.url.path)
        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("Failed {} {}", request.method, request.url.path)
            response = respond_with_error(500, "Internal Server Error")
        else:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info(
                "Completed {} {} with {} in {:.1f}ms",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
            )

    response.headers.setdefault("X-Request-ID", request_id)
    return response


# --- Error renderers ---
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    response = respond_with_error(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return respond_with_error(400, "Invalid request")


def create_app(config: ConfigData | None = None) -> FastAPI:
    """Build the application for ``config`` (the active configuration by default)."""
    config = config or get_config()
    configure_logging(config)

    is_production = config.app.environment == "production"
    app = FastAPI(
        title=config.app.title,
        description="A simple REST API for managing users",
        version=config.app.version,
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )
    app.state.config = config

    app.middleware("http")(log_requests)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health.router)
    app.include_router(users.router)

    if not is_production:
        logger.info("API documentation available at {}/docs", config.app.base_url)
    logger.info("Health check available at {}/ping", config.app.base_url)
    return app


app = create_app()
