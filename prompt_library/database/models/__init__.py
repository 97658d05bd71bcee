"""
Database models package.
All models must be imported here so Base.metadata knows every table.
"""
from prompt_library.database.models.upload_history import UploadHistory
from prompt_library.database.models.prompt import Prompt

__all__ = [
    "UploadHistory",
    "Prompt",
]
