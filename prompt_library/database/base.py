"""
Declarative base shared by all ORM models.
"""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for the prompts and upload_history tables."""
    pass
