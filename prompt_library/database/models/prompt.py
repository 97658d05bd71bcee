"""
Prompt model - stored prompt templates with tags, rating and favorite flag.
"""
from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from prompt_library.database.base import Base


class Prompt(Base):
    """
    Prompts table.

    `tags` holds the comma-delimited serialized form. `historyId` is a soft
    reference to upload_history: SQLite foreign-key enforcement stays off, so a
    dangling id never blocks a write.
    """
    __tablename__ = "prompts"

    # Columns
    id: Mapped[str] = mapped_column(Text, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[str | None] = mapped_column(Text, nullable=True)
    created: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    last_modified: Mapped[str] = mapped_column("lastModified", Text, nullable=False)

    # Columns added after the first release (see database/schema.py)
    is_active: Mapped[bool] = mapped_column(
        "isActive",
        Boolean,
        nullable=False,
        server_default=text("1")
    )
    history_id: Mapped[str | None] = mapped_column(
        "historyId",
        Text,
        ForeignKey("upload_history.id"),
        nullable=True,
        index=True
    )
    rating: Mapped[int | None] = mapped_column(
        Integer,
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_prompts_rating_range"),
        nullable=True,
        server_default=text("0")
    )
    rating_count: Mapped[int] = mapped_column(
        "ratingCount",
        Integer,
        nullable=False,
        server_default=text("0")
    )
    is_favorite: Mapped[bool] = mapped_column(
        "isFavorite",
        Boolean,
        nullable=False,
        server_default=text("0")
    )
