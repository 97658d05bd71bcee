"""
Dependency injection for FastAPI endpoints.
The store is opened once by the application lifespan and shared by every request.
"""
from fastapi import Request

from prompt_library.services.prompt_store import PromptStore


def get_store(request: Request) -> PromptStore:
    """
    Get the application's PromptStore.

    Returns:
        PromptStore instance opened at startup
    """
    return request.app.state.store
