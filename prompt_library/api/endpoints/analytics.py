"""
Library analytics API endpoint.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from prompt_library.api.deps import get_store
from prompt_library.models.domain import VisibilityMode
from prompt_library.models.schemas import LibraryAnalytics
from prompt_library.services.prompt_store import PromptStore

router = APIRouter()


@router.get("/analytics", response_model=LibraryAnalytics)
async def get_analytics(
    mode: Optional[VisibilityMode] = Query(None, description="Restrict statistics to a listing mode"),
    store: PromptStore = Depends(get_store),
):
    """Tag usage, rating statistics and per-upload characteristics."""
    return await store.get_analytics(mode)
