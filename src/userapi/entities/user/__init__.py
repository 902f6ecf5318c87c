"""User entity module.

This module contains all User-related classes organized by responsibility:
- User: Domain entity with validation rules
- UserTable: Database persistence model
- UserRepository / SqlUserRepository: Data access layer
"""

from .entity import User
from .repository import SqlUserRepository, UserRepository
from .table import UserTable

__all__ = ["User", "UserTable", "UserRepository", "SqlUserRepository"]
