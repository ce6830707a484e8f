"""Note model for storing user notes with attachments, pin and reminder state."""
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, false, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.note_version import NoteVersion
    from models.user import User


class Note(Base, UUIDv7Mixin, TimestampMixin):
    """
    Note model - the live, mutable copy of a user's note.

    Attachments are stored as an ordered JSONB list of
    {"path", "original_name", "media_type", "byte_size"} dicts. The primary image
    is kept in its own pair of columns and is not part of the attachments list.

    The attachments list is replaced, never mutated in place, so SQLAlchemy
    detects the change without MutableList tracking.
    """

    __tablename__ = "notes"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    tag: Mapped[str | None] = mapped_column(String(100), nullable=True)

    image_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    image_original_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    attachments: Mapped[list[dict]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        server_default=text("'[]'::jsonb"),
    )

    is_pinned: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )
    reminder_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None,
    )

    user: Mapped["User"] = relationship(back_populates="notes")
    versions: Mapped[list["NoteVersion"]] = relationship(
        back_populates="note",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
