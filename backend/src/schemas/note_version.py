"""Pydantic schemas for note version history endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from schemas.note import NoteContentResponse, NoteResponse


class NoteVersionResponse(NoteContentResponse):
    """Schema for a single stored version of a note."""

    note_id: UUID
    saved_at: datetime
    comment: str | None


class NoteVersionListResponse(BaseModel):
    """Schema for a note's version history, newest first."""

    items: list[NoteVersionResponse]
    total: int
    retention_limit: int  # Maximum versions kept for the note


class RestoreResponse(BaseModel):
    """Schema for restore operation response."""

    message: str
    restored_version_id: UUID
    backup_version_id: UUID  # Snapshot of the state that was overwritten
    note: NoteResponse
