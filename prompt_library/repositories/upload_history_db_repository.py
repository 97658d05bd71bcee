"""
Upload history database repository - CRUD operations for the upload_history table.
Follows the module-level function pattern of the other db repositories.
"""
from typing import List, Optional

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from prompt_library.database.models.upload_history import UploadHistory


async def create(
    session: AsyncSession,
    id: str,
    file_name: str,
    upload_date: str,
    status: str,
    is_active: bool = True,
    prompt_count: int = 0,
    error_message: Optional[str] = None,
) -> UploadHistory:
    """
    Insert an upload history record.

    Args:
        session: Async database session
        id: Record identifier
        file_name: Name of the imported file
        upload_date: ISO-8601 timestamp of the import
        status: 'success' or 'error'
        is_active: Whether prompts from this upload are shown in management views
        prompt_count: Number of prompts the import produced
        error_message: Error details for failed imports

    Returns:
        Created UploadHistory instance

    Raises:
        IntegrityError: If the id already exists
    """
    record = UploadHistory(
        id=id,
        file_name=file_name,
        upload_date=upload_date,
        status=status,
        is_active=is_active,
        prompt_count=prompt_count,
        error_message=error_message,
    )
    session.add(record)
    await session.flush()
    return record


async def get_by_id(session: AsyncSession, history_id: str) -> Optional[UploadHistory]:
    """
    Look up an upload history record by id.

    Returns:
        UploadHistory or None if not found
    """
    stmt = (
        select(UploadHistory)
        .where(UploadHistory.id == history_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_all(session: AsyncSession) -> List[UploadHistory]:
    """
    Return every upload history record, newest upload first.
    """
    stmt = (
        select(UploadHistory)
        .order_by(UploadHistory.upload_date.desc(), UploadHistory.id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def toggle_active(session: AsyncSession, history_id: str) -> bool:
    """
    Flip isActive with a single conditional UPDATE.

    Two racing toggles each flip the stored value, so an even number of
    toggles always returns the row to its starting state.

    Returns:
        True if a row was updated, False if not found
    """
    stmt = (
        update(UploadHistory)
        .where(UploadHistory.id == history_id)
        .values(is_active=case((UploadHistory.is_active == True, False), else_=True))  # noqa: E712
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount > 0
