"""
Upload history model - one row per batch import of prompts.
"""
from sqlalchemy import Boolean, CheckConstraint, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from prompt_library.database.base import Base


class UploadHistory(Base):
    """
    Upload history table - provenance ledger for imported prompts.

    Column names keep the camelCase layout of the on-disk schema; the Python
    attributes are snake_case.
    """
    __tablename__ = "upload_history"

    # Columns
    id: Mapped[str] = mapped_column(Text, primary_key=True)
    file_name: Mapped[str] = mapped_column("fileName", Text, nullable=False)
    upload_date: Mapped[str] = mapped_column("uploadDate", Text, nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        Text,
        CheckConstraint("status IN ('success', 'error')", name="ck_upload_history_status"),
        nullable=False
    )
    is_active: Mapped[bool] = mapped_column(
        "isActive",
        Boolean,
        nullable=False,
        server_default=text("1")
    )
    prompt_count: Mapped[int] = mapped_column(
        "promptCount",
        Integer,
        nullable=False,
        server_default=text("0")
    )
    error_message: Mapped[str | None] = mapped_column("errorMessage", Text, nullable=True)
