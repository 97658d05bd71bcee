"""
PromptStore - the single entry point to prompt and upload history persistence.

Every operation is one transaction on the store's Database. Rows are decoded
into PromptResponse / UploadHistoryResponse before they leave the store, and
mutations that the UI follows with a refresh return the whole refreshed
collection so callers can update their state in one round trip.
"""
import logging
from typing import Any, List, Mapping, NoReturn, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError

from prompt_library.core.config import Settings
from prompt_library.core.exceptions import (
    DuplicateRecordException,
    HistoryNotFoundException,
    PromptNotFoundException,
    RatingValidationException,
    StorageDecodeException,
    ValidationException,
)
from prompt_library.core.logging import operation_logger
from prompt_library.database.models import Prompt, UploadHistory
from prompt_library.database.schema import ensure_schema
from prompt_library.database.seed import seed_if_empty
from prompt_library.database.session import Database
from prompt_library.models.domain import HistoryStatus, VisibilityMode
from prompt_library.models.schemas import (
    ImportResult,
    LibraryAnalytics,
    PromptCreate,
    PromptResponse,
    PromptUpdate,
    UploadHistoryCreate,
    UploadHistoryResponse,
)
from prompt_library.repositories import prompt_db_repository, upload_history_db_repository
from prompt_library.services.analytics import build_analytics
from prompt_library.services.visibility import filter_visible
from prompt_library.utils.tags import deserialize_tags, serialize_tags
from prompt_library.utils.timestamp_utils import new_record_id, utc_now_iso

logger = logging.getLogger(__name__)

RATING_MIN = 0
RATING_MAX = 5

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_rating(rating: Any, prompt_id: Optional[str] = None, allow_null: bool = True) -> None:
    """
    Reject ratings outside 0-5. Values are never clamped.

    Raises:
        RatingValidationException: If the rating is not an int in range
    """
    if rating is None and allow_null:
        return
    if isinstance(rating, bool) or not isinstance(rating, int) or not RATING_MIN <= rating <= RATING_MAX:
        raise RatingValidationException(rating, prompt_id)


def _coerce(model_cls: Type[ModelT], data: Union[ModelT, Mapping[str, Any]]) -> ModelT:
    if isinstance(data, model_cls):
        return data
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        raise ValidationException(str(e)) from e


def _parse_mode(mode: Union[VisibilityMode, str]) -> VisibilityMode:
    try:
        return VisibilityMode(mode)
    except ValueError as e:
        raise ValidationException(f"unknown visibility mode {mode!r}") from e


def _raise_integrity_error(
    error: IntegrityError,
    entity: str,
    record_id: str,
    rating: Any = None,
) -> NoReturn:
    message = str(error.orig)
    if "CHECK constraint failed" in message and "rating" in message:
        raise RatingValidationException(rating, record_id) from error
    if "UNIQUE constraint failed" in message:
        raise DuplicateRecordException(entity, record_id) from error
    raise error


def decode_prompt(row: Prompt, history_is_active: Optional[bool]) -> PromptResponse:
    """
    Decode a joined prompts row into a PromptResponse.

    history_is_active is the joined upload_history.isActive; it is None when
    the prompt has no source (reported as True) or the source row is missing
    (reported as False).

    Raises:
        StorageDecodeException: If the stored values do not fit the entity
    """
    try:
        return PromptResponse(
            id=row.id,
            title=row.title,
            description=row.description or "",
            content=row.content,
            tags=deserialize_tags(row.tags),
            created=row.created,
            last_modified=row.last_modified,
            is_active=row.is_active,
            history_id=row.history_id,
            history_is_active=bool(history_is_active) if row.history_id else True,
            rating=row.rating,
            rating_count=row.rating_count,
            is_favorite=row.is_favorite,
        )
    except ValidationError as e:
        raise StorageDecodeException("prompt", row.id, str(e)) from e


def decode_history(row: UploadHistory) -> UploadHistoryResponse:
    """
    Decode an upload_history row.

    Raises:
        StorageDecodeException: If the stored values do not fit the entity
    """
    try:
        return UploadHistoryResponse(
            id=row.id,
            file_name=row.file_name,
            upload_date=row.upload_date,
            status=row.status,
            is_active=row.is_active,
            prompt_count=row.prompt_count,
            error_message=row.error_message,
        )
    except ValidationError as e:
        raise StorageDecodeException("upload_history", row.id, str(e)) from e


class PromptStore:
    """
    Async store for prompts and their upload history.

    Usage:
        store = PromptStore(Database("sqlite+aiosqlite:///data/prompts.db"))
        await store.open()
        await store.seed_if_empty()
        prompts = await store.list_prompts()
        await store.close()
    """

    def __init__(self, database: Database):
        self.database = database
        self._ready = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "PromptStore":
        """Build a store for the database configured in settings."""
        return cls(Database(settings.database_url, echo=settings.database_echo))

    # Lifecycle

    async def open(self) -> None:
        """
        Open the database and ensure the schema. Must run before any other operation.

        Raises:
            SchemaMigrationException: If the schema cannot be created or migrated
        """
        if self._ready:
            return
        await self.database.open()
        try:
            await ensure_schema(self.database)
        except Exception:
            await self.database.close()
            raise
        self._ready = True

    async def seed_if_empty(self) -> int:
        """Insert the built-in data into an empty store. Returns prompts inserted."""
        self._require_ready()
        return await seed_if_empty(self.database)

    async def close(self) -> None:
        self._ready = False
        await self.database.close()

    async def __aenter__(self) -> "PromptStore":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _require_ready(self) -> None:
        if not self._ready:
            raise RuntimeError("PromptStore not opened. Call open() first.")

    # Prompts

    async def list_prompts(self) -> List[PromptResponse]:
        """All prompts, newest first, with historyIsActive resolved."""
        self._require_ready()
        async with self.database.transaction() as session:
            rows = await prompt_db_repository.list_with_history_state(session)
        return [decode_prompt(prompt, history_is_active) for prompt, history_is_active in rows]

    async def list_visible_prompts(self, mode: Union[VisibilityMode, str]) -> List[PromptResponse]:
        """
        Prompts shown under a dashboard or management listing.

        Raises:
            ValidationException: If mode is not a known visibility mode
        """
        visibility = _parse_mode(mode)
        return filter_visible(await self.list_prompts(), visibility)

    async def get_prompt(self, prompt_id: str) -> Optional[PromptResponse]:
        """
        Get one prompt.

        Returns:
            PromptResponse or None if not found
        """
        self._require_ready()
        async with self.database.transaction() as session:
            row = await prompt_db_repository.get_with_history_state(session, prompt_id)
        if row is None:
            return None
        return decode_prompt(*row)

    async def search_prompts(
        self,
        term: str,
        mode: Union[VisibilityMode, str, None] = None,
    ) -> List[PromptResponse]:
        """
        Substring search over title, description, content and tags.

        A blank term matches everything. When mode is given the results are
        further limited to the prompts visible under it.
        """
        self._require_ready()
        visibility = _parse_mode(mode) if mode is not None else None
        term = (term or "").strip()
        async with self.database.transaction() as session:
            if term:
                rows = await prompt_db_repository.search(session, term)
            else:
                rows = await prompt_db_repository.list_with_history_state(session)
        prompts = [decode_prompt(prompt, history_is_active) for prompt, history_is_active in rows]
        if visibility is not None:
            prompts = filter_visible(prompts, visibility)
        return prompts

    @operation_logger("create_prompt")
    async def create_prompt(self, data: Union[PromptCreate, Mapping[str, Any]]) -> List[PromptResponse]:
        """
        Insert a prompt and return the refreshed prompt list.

        Raises:
            RatingValidationException: If rating is outside 0-5
            DuplicateRecordException: If the id is already taken
        """
        self._require_ready()
        data = _coerce(PromptCreate, data)
        prompt_id = data.id or new_record_id()
        validate_rating(data.rating, prompt_id)

        now = utc_now_iso()
        created = data.created or now
        try:
            async with self.database.transaction() as session:
                await prompt_db_repository.create(
                    session,
                    id=prompt_id,
                    title=data.title,
                    description=data.description,
                    content=data.content,
                    tags=serialize_tags(data.tags),
                    created=created,
                    last_modified=data.last_modified or created,
                    is_active=data.is_active,
                    history_id=data.history_id,
                    rating=data.rating,
                    rating_count=data.rating_count,
                    is_favorite=data.is_favorite,
                )
                rows = await prompt_db_repository.list_with_history_state(session)
        except IntegrityError as e:
            _raise_integrity_error(e, "Prompt", prompt_id, data.rating)

        return [decode_prompt(prompt, history_is_active) for prompt, history_is_active in rows]

    @operation_logger("update_prompt")
    async def update_prompt(
        self,
        prompt_id: str,
        data: Union[PromptUpdate, Mapping[str, Any]],
    ) -> List[PromptResponse]:
        """
        Overwrite every mutable field of a prompt and return the refreshed list.

        ratingCount is stored exactly as given; use set_rating() for counted ratings.

        Raises:
            PromptNotFoundException: If no prompt has this id (nothing is written)
            RatingValidationException: If rating is outside 0-5
        """
        self._require_ready()
        data = _coerce(PromptUpdate, data)
        validate_rating(data.rating, prompt_id)

        try:
            async with self.database.transaction() as session:
                updated = await prompt_db_repository.update_fields(
                    session,
                    prompt_id,
                    title=data.title,
                    description=data.description,
                    content=data.content,
                    tags=serialize_tags(data.tags),
                    is_active=data.is_active,
                    history_id=data.history_id,
                    rating=data.rating,
                    rating_count=data.rating_count,
                    is_favorite=data.is_favorite,
                    last_modified=utc_now_iso(),
                )
                if not updated:
                    raise PromptNotFoundException(prompt_id, "update_prompt")
                rows = await prompt_db_repository.list_with_history_state(session)
        except IntegrityError as e:
            _raise_integrity_error(e, "Prompt", prompt_id, data.rating)

        return [decode_prompt(prompt, history_is_active) for prompt, history_is_active in rows]

    @operation_logger("delete_prompt")
    async def delete_prompt(self, prompt_id: str) -> List[PromptResponse]:
        """
        Hard-delete a prompt and return the refreshed list.

        Raises:
            PromptNotFoundException: If no prompt has this id
        """
        self._require_ready()
        async with self.database.transaction() as session:
            if not await prompt_db_repository.delete_by_id(session, prompt_id):
                raise PromptNotFoundException(prompt_id, "delete_prompt")
            rows = await prompt_db_repository.list_with_history_state(session)
        return [decode_prompt(prompt, history_is_active) for prompt, history_is_active in rows]

    @operation_logger("set_rating")
    async def set_rating(self, prompt_id: str, rating: int) -> PromptResponse:
        """
        Rate a prompt (0 clears the rating), maintaining ratingCount atomically.

        Raises:
            RatingValidationException: If rating is not an int in 0-5
            PromptNotFoundException: If no prompt has this id
        """
        self._require_ready()
        validate_rating(rating, prompt_id, allow_null=False)
        async with self.database.transaction() as session:
            if not await prompt_db_repository.apply_rating(session, prompt_id, rating, utc_now_iso()):
                raise PromptNotFoundException(prompt_id, "set_rating")
            row = await prompt_db_repository.get_with_history_state(session, prompt_id)
        return decode_prompt(*row)

    @operation_logger("set_favorite")
    async def set_favorite(self, prompt_id: str, is_favorite: bool) -> PromptResponse:
        """
        Mark or unmark a prompt as favorite.

        Raises:
            PromptNotFoundException: If no prompt has this id
        """
        self._require_ready()
        async with self.database.transaction() as session:
            updated = await prompt_db_repository.update_fields(
                session,
                prompt_id,
                is_favorite=bool(is_favorite),
                last_modified=utc_now_iso(),
            )
            if not updated:
                raise PromptNotFoundException(prompt_id, "set_favorite")
            row = await prompt_db_repository.get_with_history_state(session, prompt_id)
        return decode_prompt(*row)

    @operation_logger("toggle_prompt_active")
    async def toggle_prompt_active(self, prompt_id: str) -> List[PromptResponse]:
        """
        Flip a prompt's own isActive flag in place and return the refreshed list.

        Raises:
            PromptNotFoundException: If no prompt has this id
        """
        self._require_ready()
        async with self.database.transaction() as session:
            if not await prompt_db_repository.toggle_active(session, prompt_id, utc_now_iso()):
                raise PromptNotFoundException(prompt_id, "toggle_prompt_active")
            rows = await prompt_db_repository.list_with_history_state(session)
        return [decode_prompt(prompt, history_is_active) for prompt, history_is_active in rows]

    # Upload history

    async def list_history(self) -> List[UploadHistoryResponse]:
        """All upload history entries, newest upload first."""
        self._require_ready()
        async with self.database.transaction() as session:
            rows = await upload_history_db_repository.list_all(session)
        return [decode_history(row) for row in rows]

    @operation_logger("create_history")
    async def create_history(
        self,
        data: Union[UploadHistoryCreate, Mapping[str, Any]],
    ) -> List[UploadHistoryResponse]:
        """
        Record an upload history entry and return the refreshed history list.

        Raises:
            DuplicateRecordException: If the id is already taken
        """
        self._require_ready()
        data = _coerce(UploadHistoryCreate, data)
        history_id = data.id or new_record_id()
        try:
            async with self.database.transaction() as session:
                await upload_history_db_repository.create(
                    session,
                    id=history_id,
                    file_name=data.file_name,
                    upload_date=data.upload_date or utc_now_iso(),
                    status=HistoryStatus(data.status).value,
                    is_active=data.is_active,
                    prompt_count=data.prompt_count,
                    error_message=data.error_message,
                )
                rows = await upload_history_db_repository.list_all(session)
        except IntegrityError as e:
            _raise_integrity_error(e, "Upload history entry", history_id)
        return [decode_history(row) for row in rows]

    @operation_logger("toggle_history_active")
    async def toggle_history_active(self, history_id: str) -> List[UploadHistoryResponse]:
        """
        Flip an upload's isActive flag in place and return the refreshed history list.

        Prompts referencing the upload keep their own flags; their effective
        state follows through the join.

        Raises:
            HistoryNotFoundException: If no upload history entry has this id
        """
        self._require_ready()
        async with self.database.transaction() as session:
            if not await upload_history_db_repository.toggle_active(session, history_id):
                raise HistoryNotFoundException(history_id, "toggle_history_active")
            rows = await upload_history_db_repository.list_all(session)
        return [decode_history(row) for row in rows]

    # Batch import

    @operation_logger("import_batch")
    async def import_batch(
        self,
        file_name: str,
        prompts: Sequence[Union[PromptCreate, Mapping[str, Any]]],
        status: Union[HistoryStatus, str] = HistoryStatus.SUCCESS,
        error_message: Optional[str] = None,
    ) -> ImportResult:
        """
        Record one upload and insert all of its prompts in a single transaction.

        Every prompt gets the new upload's id as historyId. If any insert fails
        neither the upload nor any of its prompts are kept.

        Raises:
            RatingValidationException: If any prompt has a rating outside 0-5
            DuplicateRecordException: If any prompt id is already taken
        """
        self._require_ready()
        candidates = [_coerce(PromptCreate, prompt) for prompt in prompts]
        prompt_ids = [candidate.id or new_record_id() for candidate in candidates]
        for prompt_id, candidate in zip(prompt_ids, candidates):
            validate_rating(candidate.rating, prompt_id)

        history_id = new_record_id()
        now = utc_now_iso()
        current_id = history_id
        try:
            async with self.database.transaction() as session:
                await upload_history_db_repository.create(
                    session,
                    id=history_id,
                    file_name=file_name,
                    upload_date=now,
                    status=HistoryStatus(status).value,
                    is_active=True,
                    prompt_count=len(candidates),
                    error_message=error_message,
                )
                for prompt_id, candidate in zip(prompt_ids, candidates):
                    current_id = prompt_id
                    created = candidate.created or now
                    await prompt_db_repository.create(
                        session,
                        id=prompt_id,
                        title=candidate.title,
                        description=candidate.description,
                        content=candidate.content,
                        tags=serialize_tags(candidate.tags),
                        created=created,
                        last_modified=candidate.last_modified or created,
                        is_active=candidate.is_active,
                        history_id=history_id,
                        rating=candidate.rating,
                        rating_count=candidate.rating_count,
                        is_favorite=candidate.is_favorite,
                    )

                history_row = await upload_history_db_repository.get_by_id(session, history_id)
                prompt_rows = [
                    await prompt_db_repository.get_with_history_state(session, prompt_id)
                    for prompt_id in prompt_ids
                ]
        except IntegrityError as e:
            _raise_integrity_error(e, "Prompt", current_id)

        logger.info(f"Imported {len(prompt_ids)} prompts from {file_name} as upload {history_id}")
        return ImportResult(
            history=decode_history(history_row),
            prompts=[decode_prompt(*row) for row in prompt_rows],
        )

    # Analytics

    async def get_analytics(self, mode: Union[VisibilityMode, str, None] = None) -> LibraryAnalytics:
        """
        Tag, rating and per-source statistics, optionally over a visibility mode's listing.
        """
        self._require_ready()
        visibility = _parse_mode(mode) if mode is not None else None
        async with self.database.transaction() as session:
            prompt_rows = await prompt_db_repository.list_with_history_state(session)
            history_rows = await upload_history_db_repository.list_all(session)

        prompts = [decode_prompt(prompt, history_is_active) for prompt, history_is_active in prompt_rows]
        if visibility is not None:
            prompts = filter_visible(prompts, visibility)
        return build_analytics(prompts, [decode_history(row) for row in history_rows])
