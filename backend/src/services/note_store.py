"""Note Store: persistence of the live, canonical note state."""
from typing import Protocol
from uuid import UUID

from sqlalchemy import delete, func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.note import Note
from services.exceptions import NoteAccessDeniedError, NoteNotFoundError
from services.utils import storage_errors


class NoteStore(Protocol):
    """Interface the Note Service and Version Manager use to read and write notes."""

    async def get_note(self, note_id: UUID) -> Note | None:
        """Return the note, or None if it does not exist."""
        ...

    async def list_notes(self, user_id: UUID) -> list[Note]:
        """Return a user's notes, pinned first, then newest first."""
        ...

    async def save_note(self, note: Note) -> Note:
        """Insert or update the note and return the persisted state."""
        ...

    async def delete_note(self, note_id: UUID) -> None:
        """Delete the note. Deleting a missing note is a no-op."""
        ...


class SqlNoteStore:
    """
    NoteStore backed by an async SQLAlchemy session.

    Writes are flushed, not committed; the request-scoped session commits at
    request end. Database errors surface as StorageError.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_note(self, note_id: UUID) -> Note | None:
        with storage_errors("get_note"):
            result = await self.db.execute(select(Note).where(Note.id == note_id))
            return result.scalar_one_or_none()

    async def list_notes(self, user_id: UUID) -> list[Note]:
        with storage_errors("list_notes"):
            result = await self.db.execute(
                select(Note)
                .where(Note.user_id == user_id)
                .order_by(Note.is_pinned.desc(), Note.created_at.desc(), Note.id.desc()),
            )
            return list(result.scalars().all())

    async def save_note(self, note: Note) -> Note:
        with storage_errors("save_note"):
            if inspect(note).persistent:
                note.updated_at = func.clock_timestamp()
            self.db.add(note)
            await self.db.flush()
            await self.db.refresh(note)
            return note

    async def delete_note(self, note_id: UUID) -> None:
        with storage_errors("delete_note"):
            await self.db.execute(delete(Note).where(Note.id == note_id))


async def get_owned_note(store: NoteStore, note_id: UUID, requester_id: UUID) -> Note:
    """
    Fetch a note and verify the requester owns it.

    Raises:
        NoteNotFoundError: The note does not exist.
        NoteAccessDeniedError: The note belongs to another user.
    """
    note = await store.get_note(note_id)
    if note is None:
        raise NoteNotFoundError(note_id)
    if note.user_id != requester_id:
        raise NoteAccessDeniedError(note_id, requester_id)
    return note
