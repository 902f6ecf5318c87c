"""Response bodies shared by the routers and the error renderers."""

from loguru import logger
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str = Field(description="Human readable error message")


class MessageResponse(BaseModel):
    message: str


def respond_with_error(status_code: int, message: str) -> JSONResponse:
    logger.info("Responding with error: {} (status code: {})", message, status_code)
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(error=message).model_dump()
    )
