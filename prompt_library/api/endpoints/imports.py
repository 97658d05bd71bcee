"""
Batch import API endpoint.
The client parses the uploaded file; this endpoint records the upload and its
prompts atomically.
"""
import logging
import time

from fastapi import APIRouter, Depends

from prompt_library.api.deps import get_store
from prompt_library.core.logging import log_operation_start, log_operation_complete, get_request_id
from prompt_library.models.schemas import ImportBatchRequest, ImportResult
from prompt_library.services.prompt_store import PromptStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/imports", response_model=ImportResult, status_code=201)
async def import_prompts(batch: ImportBatchRequest, store: PromptStore = Depends(get_store)):
    """Import a batch of prompts from one file."""
    start_time = time.time()
    operation = "import_prompts"

    log_operation_start(
        logger="prompt_library.api.endpoints.imports",
        function="import_prompts",
        operation=operation,
        message=f"Importing {len(batch.prompts)} prompts from {batch.file_name}",
        context={
            "file_name": batch.file_name,
            "prompt_count": len(batch.prompts),
            "status": batch.status.value,
            "request_id": get_request_id(),
        }
    )

    result = await store.import_batch(
        batch.file_name,
        batch.prompts,
        status=batch.status,
        error_message=batch.error_message,
    )

    log_operation_complete(
        logger="prompt_library.api.endpoints.imports",
        function="import_prompts",
        operation=operation,
        message="Import recorded",
        context={
            "history_id": result.history.id,
            "prompt_count": len(result.prompts),
        },
        duration=time.time() - start_time
    )
    return result
