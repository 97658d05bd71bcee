"""
Database package.
Provides the async SQLAlchemy Database object and ORM models.
Schema management lives in database.schema, seed data in database.seed.
"""
from prompt_library.database.base import Base
from prompt_library.database.session import Database

__all__ = [
    "Base",
    "Database",
]
