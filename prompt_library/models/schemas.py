"""
Pydantic models for API request/response validation.

These are also the typed entities the store returns: every row read from the
database is decoded into PromptResponse or UploadHistoryResponse. JSON field
names are camelCase (historyId, isActive, ...), Python attributes snake_case.
"""
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from prompt_library.models.domain import HistoryStatus


class CamelModel(BaseModel):
    """Base model serializing to camelCase and accepting either spelling."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Response Models

class PromptResponse(CamelModel):
    """A stored prompt joined with its source upload's active flag."""
    id: str
    title: str
    description: str = ""
    content: str
    tags: List[str] = Field(default_factory=list)
    created: str
    last_modified: str
    is_active: bool = True
    history_id: Optional[str] = None
    history_is_active: bool = True
    rating: Optional[int] = Field(default=0, ge=0, le=5)
    rating_count: int = Field(default=0, ge=0)
    is_favorite: bool = False


class UploadHistoryResponse(CamelModel):
    """One batch import in the upload history ledger."""
    id: str
    file_name: str
    upload_date: str
    status: HistoryStatus
    is_active: bool = True
    prompt_count: int = Field(default=0, ge=0)
    error_message: Optional[str] = None


class ImportResult(CamelModel):
    """Outcome of a batch import: the new history entry and the prompts it produced."""
    history: UploadHistoryResponse
    prompts: List[PromptResponse]


class TagUsage(CamelModel):
    tag: str
    count: int
    percentage: float


class RatingAnalytics(CamelModel):
    average_rating: float
    rating_distribution: Dict[int, int]
    favorite_count: int
    most_rated_prompts: List[PromptResponse]


class SourceCharacteristics(CamelModel):
    history_id: str
    file_name: str
    is_active: bool
    prompt_count: int
    avg_content_length: float
    avg_tags: float
    active_percentage: float


class LibraryAnalytics(CamelModel):
    """Aggregate statistics over a prompt listing."""
    total_prompts: int
    tag_usage: List[TagUsage]
    rating_analytics: RatingAnalytics
    sources: List[SourceCharacteristics]


class ErrorResponse(BaseModel):
    """Response model for errors."""
    error: str
    detail: Optional[str] = None
    status_code: int


# Request Models

class PromptCreate(CamelModel):
    """
    Request model for creating a prompt.

    id and timestamps are generated when omitted. rating is range-checked by
    the store, not here, so out-of-range values surface as a store validation error.
    """
    id: Optional[str] = None
    title: str = Field(..., min_length=1)
    description: str = ""
    content: str
    tags: Union[List[str], str, None] = None
    created: Optional[str] = None
    last_modified: Optional[str] = None
    is_active: bool = True
    history_id: Optional[str] = None
    rating: Optional[int] = 0
    rating_count: int = Field(default=0, ge=0)
    is_favorite: bool = False


class PromptUpdate(CamelModel):
    """
    Request model for overwriting every mutable field of a prompt.

    Every field is required: an update replaces the whole prompt, so a
    missing field is rejected instead of being reset to its default.
    """
    title: str = Field(..., min_length=1)
    description: str = Field(...)
    content: str
    tags: Union[List[str], str, None] = Field(...)
    is_active: bool = Field(...)
    history_id: Optional[str] = Field(...)
    rating: Optional[int] = Field(...)
    rating_count: int = Field(..., ge=0)
    is_favorite: bool = Field(...)


class RatingRequest(CamelModel):
    """Request model for rating a prompt (0 clears the rating)."""
    rating: int


class FavoriteRequest(CamelModel):
    """Request model for marking or unmarking a favorite."""
    is_favorite: bool


class UploadHistoryCreate(CamelModel):
    """Request model for recording an upload history entry."""
    id: Optional[str] = None
    file_name: str = Field(..., min_length=1)
    upload_date: Optional[str] = None
    status: HistoryStatus = HistoryStatus.SUCCESS
    is_active: bool = True
    prompt_count: int = Field(default=0, ge=0)
    error_message: Optional[str] = None


class ImportBatchRequest(CamelModel):
    """Request model for importing a batch of already-parsed prompts from one file."""
    file_name: str = Field(..., min_length=1)
    prompts: List[PromptCreate] = Field(default_factory=list)
    status: HistoryStatus = HistoryStatus.SUCCESS
    error_message: Optional[str] = None
