"""NoteVersion model for storing note version history."""
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, func, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, UUIDv7Mixin

if TYPE_CHECKING:
    from models.note import Note


class VersionComment(StrEnum):
    """Comments recorded on snapshots written by the application."""

    INITIAL = "Initial version"
    BEFORE_UPDATE = "Before update"
    BACKUP_BEFORE_RESTORE = "Backup before restore"
    BEFORE_DELETE = "Before delete"


class NoteVersion(Base, UUIDv7Mixin):
    """
    NoteVersion model - an immutable snapshot of a note's content fields.

    Version semantics:
    - Note is always the live/current state
    - A NoteVersion holds the note's state as it was immediately before the
      mutation that triggered the snapshot (or the created state, for the
      initial version)
    - saved_at is the ordering key; ties are broken by id (UUIDv7 is
      insertion-ordered)
    - Versions never reference each other; the history is the set of rows for
      a note ordered by (saved_at, id)
    - Rows are pruned to the retention limit and deleted with their note
    """

    __tablename__ = "note_versions"
    __table_args__ = (
        # Primary query pattern:
        # SELECT * FROM note_versions WHERE note_id = ? ORDER BY saved_at DESC, id DESC
        Index("ix_note_versions_note_id_saved_at", "note_id", "saved_at"),
    )

    note_id: Mapped[UUID] = mapped_column(
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Owner at snapshot time, kept for audit independence from the note row
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
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
    is_pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reminder_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    saved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
        nullable=False,
    )
    comment: Mapped[str | None] = mapped_column(
        String(200),
        nullable=True,
        comment="Informational only, e.g. 'Before update'; never parsed",
    )

    note: Mapped["Note"] = relationship(back_populates="versions")
