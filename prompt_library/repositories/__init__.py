"""
Repository layer exports.

This module exports all database repositories for easy import.
"""
from prompt_library.repositories import prompt_db_repository
from prompt_library.repositories import upload_history_db_repository

__all__ = [
    'prompt_db_repository',
    'upload_history_db_repository',
]
