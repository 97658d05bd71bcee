"""
Prompt database repository - CRUD operations for the prompts table.

Module-level async functions taking the session, like the other db repositories.
Listings left-join upload_history so every row carries its source's isActive
flag (None when the prompt has no source or the source row is missing).
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import case, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from prompt_library.database.models.prompt import Prompt
from prompt_library.database.models.upload_history import UploadHistory

logger = logging.getLogger(__name__)

PromptRow = Tuple[Prompt, Optional[bool]]


def _joined_select():
    return (
        select(Prompt, UploadHistory.is_active)
        .outerjoin(UploadHistory, Prompt.history_id == UploadHistory.id)
        .execution_options(populate_existing=True)
    )


async def list_with_history_state(session: AsyncSession) -> List[PromptRow]:
    """
    List all prompts, newest first, each paired with its source's isActive flag.

    Args:
        session: Async database session

    Returns:
        List of (Prompt, history_is_active) tuples
    """
    stmt = _joined_select().order_by(Prompt.created.desc(), Prompt.id)
    result = await session.execute(stmt)
    return [(prompt, history_is_active) for prompt, history_is_active in result.all()]


async def get_with_history_state(session: AsyncSession, prompt_id: str) -> Optional[PromptRow]:
    """
    Get one prompt paired with its source's isActive flag.

    Returns:
        (Prompt, history_is_active) or None if not found
    """
    stmt = _joined_select().where(Prompt.id == prompt_id)
    row = (await session.execute(stmt)).first()
    if row is None:
        return None
    return row[0], row[1]


async def search(session: AsyncSession, term: str) -> List[PromptRow]:
    """
    Case-insensitive substring search over title, description, content and tags.

    Args:
        session: Async database session
        term: Text to look for (LIKE wildcards in it are matched literally)

    Returns:
        Matching (Prompt, history_is_active) tuples, newest first
    """
    stmt = (
        _joined_select()
        .where(
            or_(
                Prompt.title.icontains(term, autoescape=True),
                Prompt.description.icontains(term, autoescape=True),
                Prompt.content.icontains(term, autoescape=True),
                Prompt.tags.icontains(term, autoescape=True),
            )
        )
        .order_by(Prompt.created.desc(), Prompt.id)
    )
    result = await session.execute(stmt)
    return [(prompt, history_is_active) for prompt, history_is_active in result.all()]


async def count(session: AsyncSession) -> int:
    """Count all prompts."""
    stmt = select(func.count()).select_from(Prompt)
    return int((await session.execute(stmt)).scalar_one())


async def create(session: AsyncSession, **fields) -> Prompt:
    """
    Insert a prompt.

    Args:
        session: Async database session
        **fields: Column values keyed by attribute name (id, title, tags, is_active, ...)

    Returns:
        Created Prompt instance

    Raises:
        IntegrityError: If the id already exists or rating violates its CHECK
    """
    prompt = Prompt(**fields)
    session.add(prompt)
    await session.flush()
    return prompt


async def update_fields(session: AsyncSession, prompt_id: str, **fields) -> bool:
    """
    Overwrite the given columns of one prompt.

    Returns:
        True if a row was updated, False if not found
    """
    stmt = (
        update(Prompt)
        .where(Prompt.id == prompt_id)
        .values(**fields)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount > 0


async def delete_by_id(session: AsyncSession, prompt_id: str) -> bool:
    """
    Hard-delete a prompt. Upload history rows are not touched.

    Returns:
        True if deleted, False if not found
    """
    stmt = (
        delete(Prompt)
        .where(Prompt.id == prompt_id)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount > 0


async def apply_rating(session: AsyncSession, prompt_id: str, rating: int, last_modified: str) -> bool:
    """
    Set a rating and adjust ratingCount in one statement.

    The count goes up when a rating is first given (previous 0/NULL), down when
    a rating is cleared back to 0 (never below zero), and is unchanged when an
    existing rating is overwritten or an unrated prompt is cleared again.

    Returns:
        True if a row was updated, False if not found
    """
    previous = func.coalesce(Prompt.rating, 0)
    if rating == 0:
        new_count = case(
            (previous != 0, func.max(Prompt.rating_count - 1, 0)),
            else_=Prompt.rating_count,
        )
    else:
        new_count = case(
            (previous == 0, Prompt.rating_count + 1),
            else_=Prompt.rating_count,
        )

    return await update_fields(
        session,
        prompt_id,
        rating=rating,
        rating_count=new_count,
        last_modified=last_modified,
    )


async def toggle_active(session: AsyncSession, prompt_id: str, last_modified: str) -> bool:
    """
    Flip isActive in place (no read-modify-write).

    Returns:
        True if a row was updated, False if not found
    """
    return await update_fields(
        session,
        prompt_id,
        is_active=case((Prompt.is_active == True, False), else_=True),  # noqa: E712
        last_modified=last_modified,
    )
