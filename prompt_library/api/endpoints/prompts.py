"""
Prompt API endpoints.
Handles listing, search, CRUD, rating, favorites and the per-prompt active toggle.
"""
from typing import List, Optional
import time
import logging

from fastapi import APIRouter, Depends, Query

from prompt_library.api.deps import get_store
from prompt_library.core.exceptions import PromptNotFoundException
from prompt_library.core.logging import log_event, get_request_id
from prompt_library.models.domain import VisibilityMode
from prompt_library.models.schemas import (
    FavoriteRequest,
    PromptCreate,
    PromptResponse,
    PromptUpdate,
    RatingRequest,
)
from prompt_library.services.prompt_store import PromptStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/prompts", response_model=List[PromptResponse])
async def list_prompts(
    mode: Optional[VisibilityMode] = Query(None, description="dashboard or management; omit for every prompt"),
    q: Optional[str] = Query(None, description="Substring to search for in title, description, content and tags"),
    favorites: bool = Query(False, description="Only return favorite prompts"),
    store: PromptStore = Depends(get_store),
):
    """List prompts, newest first."""
    start_time = time.time()

    if q:
        prompts = await store.search_prompts(q, mode=mode)
    elif mode is not None:
        prompts = await store.list_visible_prompts(mode)
    else:
        prompts = await store.list_prompts()

    if favorites:
        prompts = [prompt for prompt in prompts if prompt.is_favorite]

    log_event(
        level="DEBUG",
        logger="prompt_library.api.endpoints.prompts",
        function="list_prompts",
        operation="list_prompts",
        event="operation_complete",
        message="Listed prompts",
        context={
            "mode": mode.value if mode else None,
            "query": q,
            "favorites": favorites,
            "prompt_count": len(prompts),
            "duration_seconds": time.time() - start_time,
            "request_id": get_request_id(),
        }
    )
    return prompts


@router.get("/prompts/{prompt_id}", response_model=PromptResponse)
async def get_prompt(prompt_id: str, store: PromptStore = Depends(get_store)):
    """Get a single prompt."""
    prompt = await store.get_prompt(prompt_id)
    if prompt is None:
        log_event(
            level="WARNING",
            logger="prompt_library.api.endpoints.prompts",
            function="get_prompt",
            operation="get_prompt",
            event="validation_error",
            message="Prompt not found",
            context={"prompt_id": prompt_id}
        )
        raise PromptNotFoundException(prompt_id)
    return prompt


@router.post("/prompts", response_model=List[PromptResponse], status_code=201)
async def create_prompt(prompt: PromptCreate, store: PromptStore = Depends(get_store)):
    """Create a prompt and return the refreshed prompt list."""
    return await store.create_prompt(prompt)


@router.put("/prompts/{prompt_id}", response_model=List[PromptResponse])
async def update_prompt(prompt_id: str, prompt: PromptUpdate, store: PromptStore = Depends(get_store)):
    """Overwrite a prompt and return the refreshed prompt list."""
    return await store.update_prompt(prompt_id, prompt)


@router.delete("/prompts/{prompt_id}", response_model=List[PromptResponse])
async def delete_prompt(prompt_id: str, store: PromptStore = Depends(get_store)):
    """Delete a prompt and return the refreshed prompt list."""
    return await store.delete_prompt(prompt_id)


@router.put("/prompts/{prompt_id}/rating", response_model=PromptResponse)
async def rate_prompt(prompt_id: str, request: RatingRequest, store: PromptStore = Depends(get_store)):
    """Rate a prompt from 1 to 5, or clear its rating with 0."""
    return await store.set_rating(prompt_id, request.rating)


@router.put("/prompts/{prompt_id}/favorite", response_model=PromptResponse)
async def favorite_prompt(prompt_id: str, request: FavoriteRequest, store: PromptStore = Depends(get_store)):
    """Mark or unmark a prompt as favorite."""
    return await store.set_favorite(prompt_id, request.is_favorite)


@router.put("/prompts/{prompt_id}/toggle", response_model=List[PromptResponse])
async def toggle_prompt(prompt_id: str, store: PromptStore = Depends(get_store)):
    """Flip a prompt's own active flag and return the refreshed prompt list."""
    return await store.toggle_prompt_active(prompt_id)
