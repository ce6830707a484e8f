"""Service layer for note CRUD operations."""
import logging
from datetime import datetime
from uuid import UUID

from models.note import Note
from models.note_version import VersionComment
from schemas.note import NoteCreate, NoteUpdate
from services.exceptions import (
    AttachmentLimitExceededError,
    AttachmentNotFoundError,
    TitleTooLongError,
)
from services.note_store import NoteStore, get_owned_note
from services.version_manager import VersionManager

logger = logging.getLogger(__name__)


class NoteService:
    """
    Note service with full CRUD operations.

    Every mutation of an existing note snapshots the pre-mutation state through
    the VersionManager before the change is applied. Snapshot failures never
    fail the mutation. Deleting a note removes its whole version history.
    """

    def __init__(
        self,
        note_store: NoteStore,
        version_manager: VersionManager,
        max_attachments: int | None = None,
        max_title_length: int | None = None,
    ) -> None:
        self.note_store = note_store
        self.version_manager = version_manager
        self.max_attachments = max_attachments
        self.max_title_length = max_title_length

    async def create(self, user_id: UUID, data: NoteCreate) -> Note:
        """
        Create a new note for a user and record its initial version.

        Args:
            user_id: Owner of the new note.
            data: Note creation data.

        Returns:
            The created note.
        """
        self._check_title_length(data.title)
        self._check_attachment_count(len(data.attachments))
        note = Note(
            user_id=user_id,
            title=data.title,
            description=data.description,
            tag=data.tag,
            image_path=data.primary_image.path if data.primary_image else None,
            image_original_name=(
                data.primary_image.original_name if data.primary_image else None
            ),
            attachments=[a.model_dump() for a in data.attachments],
            is_pinned=data.is_pinned,
            reminder_at=data.reminder_at,
        )
        note = await self.note_store.save_note(note)
        await self.version_manager.snapshot(note, VersionComment.INITIAL)
        logger.info("Created note %s for user %s", note.id, user_id)
        return note

    async def get(self, user_id: UUID, note_id: UUID) -> Note:
        """
        Get a note owned by the user.

        Raises:
            NoteNotFoundError: The note does not exist.
            NoteAccessDeniedError: The note belongs to another user.
        """
        return await get_owned_note(self.note_store, note_id, user_id)

    async def list_for_user(self, user_id: UUID) -> list[Note]:
        """List a user's notes, pinned first, then newest first."""
        return await self.note_store.list_notes(user_id)

    async def update(self, user_id: UUID, note_id: UUID, data: NoteUpdate) -> Note:
        """
        Apply a partial update to a note.

        Only the fields set on `data` change. The pre-update state is
        snapshotted first. A request with no fields set is a no-op and records
        no version.

        Raises:
            NoteNotFoundError: The note does not exist.
            NoteAccessDeniedError: The note belongs to another user.
            AttachmentLimitExceededError: Too many attachments.
            TitleTooLongError: The new title exceeds the configured maximum.
        """
        note = await get_owned_note(self.note_store, note_id, user_id)

        changes = data.to_column_values()
        if not changes:
            return note
        if "title" in changes:
            self._check_title_length(changes["title"])
        if "attachments" in changes:
            self._check_attachment_count(len(changes["attachments"]))

        await self.version_manager.snapshot(note, VersionComment.BEFORE_UPDATE)

        for field, value in changes.items():
            setattr(note, field, value)
        return await self.note_store.save_note(note)

    async def set_pinned(self, user_id: UUID, note_id: UUID, is_pinned: bool) -> Note:
        """Pin or unpin a note."""
        return await self.update(user_id, note_id, NoteUpdate(is_pinned=is_pinned))

    async def set_reminder(
        self,
        user_id: UUID,
        note_id: UUID,
        reminder_at: datetime | None,
    ) -> Note:
        """Set a note's reminder, or clear it with None."""
        return await self.update(user_id, note_id, NoteUpdate(reminder_at=reminder_at))

    async def remove_attachment(self, user_id: UUID, note_id: UUID, index: int) -> Note:
        """
        Remove the attachment at `index` from a note.

        Raises:
            NoteNotFoundError: The note does not exist.
            NoteAccessDeniedError: The note belongs to another user.
            AttachmentNotFoundError: `index` is out of range.
        """
        note = await get_owned_note(self.note_store, note_id, user_id)
        if not 0 <= index < len(note.attachments):
            raise AttachmentNotFoundError(note_id, index)

        await self.version_manager.snapshot(note, VersionComment.BEFORE_UPDATE)

        note.attachments = [a for i, a in enumerate(note.attachments) if i != index]
        return await self.note_store.save_note(note)

    async def delete(self, user_id: UUID, note_id: UUID) -> None:
        """
        Delete a note and its entire version history.

        The pre-delete state is snapshotted like any other mutation, then the
        history (that snapshot included) is removed. Removing the history is
        part of the delete, not a side effect: if it fails, the error
        propagates and the note is kept.

        Raises:
            NoteNotFoundError: The note does not exist.
            NoteAccessDeniedError: The note belongs to another user.
        """
        note = await get_owned_note(self.note_store, note_id, user_id)
        await self.version_manager.snapshot(note, VersionComment.BEFORE_DELETE)
        removed = await self.version_manager.delete_history(note.id)
        await self.note_store.delete_note(note.id)
        logger.info("Deleted note %s and %d version(s)", note.id, removed)

    def _check_title_length(self, title: str) -> None:
        if self.max_title_length is not None and len(title) > self.max_title_length:
            raise TitleTooLongError(len(title), self.max_title_length)

    def _check_attachment_count(self, count: int) -> None:
        if self.max_attachments is not None and count > self.max_attachments:
            raise AttachmentLimitExceededError(count, self.max_attachments)
