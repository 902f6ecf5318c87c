"""User domain entity."""

import re
from typing import Annotated, Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.userapi.core.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

# Signed 64-bit, the widest integer the store accepts
Int64 = Annotated[int, Field(ge=-(2**63), le=2**63 - 1)]


class User(BaseModel):
    """User entity representing a person in the system.

    ``id`` is assigned by the store on creation and is ``None`` before that.
    Missing or ``null`` fields decode to their zero values so that
    :meth:`check` reports which business rule they break; values of the
    wrong JSON type or outside the 64-bit range are rejected at decode time.
    """

    model_config = ConfigDict(strict=True)

    id: Int64 | None = Field(default=None, description="Store-assigned identifier")
    name: str = Field(default="", description="User's name")
    age: Int64 = Field(default=0, description="User's age in years")
    phone_number: str = Field(default="", description="User's phone number")
    email: str = Field(default="", description="User's email address")

    @field_validator("name", "phone_number", "email", mode="before")
    @classmethod
    def null_as_empty_string(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("age", mode="before")
    @classmethod
    def null_as_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    def check(self) -> None:
        """Raise :class:`ValidationError` for the first broken rule."""
        logger.debug("Validating user data: {}", self)
        try:
            if not self.name:
                raise ValidationError("name is required")
            if self.age <= 0:
                raise ValidationError(f"age must be positive, got: {self.age}")
            if not self.phone_number:
                raise ValidationError("phone number is required")
            if not self.email:
                raise ValidationError("email is required")
            if not EMAIL_PATTERN.fullmatch(self.email):
                raise ValidationError(f"invalid email format: {self.email}")
        except ValidationError as e:
            logger.warning("Validation error: {}", e)
            raise
        logger.debug("User validation successful")
