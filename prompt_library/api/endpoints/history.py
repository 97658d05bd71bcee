"""
Upload history API endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends

from prompt_library.api.deps import get_store
from prompt_library.models.schemas import UploadHistoryCreate, UploadHistoryResponse
from prompt_library.services.prompt_store import PromptStore

router = APIRouter()


@router.get("/history", response_model=List[UploadHistoryResponse])
async def list_history(store: PromptStore = Depends(get_store)):
    """List upload history, newest upload first."""
    return await store.list_history()


@router.post("/history", response_model=List[UploadHistoryResponse], status_code=201)
async def create_history(entry: UploadHistoryCreate, store: PromptStore = Depends(get_store)):
    """Record an upload and return the refreshed history list."""
    return await store.create_history(entry)


@router.put("/history/{history_id}/toggle", response_model=List[UploadHistoryResponse])
async def toggle_history(history_id: str, store: PromptStore = Depends(get_store)):
    """
    Flip an upload's active flag.

    Prompts from the upload keep their own flags; management listings hide
    them while the upload is inactive.
    """
    return await store.toggle_history_active(history_id)
