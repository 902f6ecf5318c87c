"""User API: CRUD service for user records."""

__version__ = "1.0.0"
