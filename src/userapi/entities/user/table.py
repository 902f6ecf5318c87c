"""User database table model."""

from sqlalchemy import BigInteger
from sqlmodel import Field, SQLModel


class UserTable(SQLModel, table=True):
    """Persistence model for users.

    This represents how the User entity is stored in the database.
    It's separate from the domain entity to maintain clean architecture
    while keeping related code together.
    """

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    age: int = Field(sa_type=BigInteger)
    phone_number: str = Field(max_length=50)
    email: str = Field(max_length=255)
