"""
Version Manager: snapshot, prune, list and restore for note version history.

Every note-mutating operation calls `snapshot()` with the note state that is
about to be superseded. Snapshots and pruning are side effects of the primary
mutation: their storage failures are logged and swallowed so the primary
mutation still succeeds. Read and restore requests surface their failures.

Ownership is always passed in explicitly (`requester_id`) and checked against
the note's `user_id` from the Note Store.
"""
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from models.note import Note
from models.note_version import NoteVersion, VersionComment
from services.exceptions import (
    NoteAccessDeniedError,
    NoteNotFoundError,
    StorageError,
    VersionMismatchError,
    VersionNotFoundError,
)
from services.note_store import NoteStore, get_owned_note
from services.version_store import VersionStore

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_LIMIT = 10

# Fields copied from a note into a snapshot, and back onto the note on restore.
# id, user_id and timestamps are never copied.
CONTENT_FIELDS = (
    "title",
    "description",
    "tag",
    "image_path",
    "image_original_name",
    "attachments",
    "is_pinned",
    "reminder_at",
)

def _utc_now() -> datetime:
    return datetime.now(UTC)


def content_fields(source: Note | NoteVersion) -> dict[str, Any]:
    """Return a detached copy of the content fields of a note or version."""
    values = {field: getattr(source, field) for field in CONTENT_FIELDS}
    values["attachments"] = [dict(a) for a in values["attachments"] or []]
    return values


@dataclass
class RestoreResult:
    """Result of restoring a note to a version."""

    note: Note
    backup_version_id: UUID


class VersionManager:
    """Maintains the version history of notes and restores notes from it."""

    def __init__(
        self,
        note_store: NoteStore,
        version_store: VersionStore,
        retention_limit: int = DEFAULT_RETENTION_LIMIT,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """
        Args:
            note_store: Store holding the live notes.
            version_store: Store holding the snapshots.
            retention_limit: Maximum snapshots kept per note (at least 1).
            clock: Source of saved_at timestamps.
        """
        if retention_limit < 1:
            raise ValueError("retention_limit must be at least 1")
        self.note_store = note_store
        self.version_store = version_store
        self.retention_limit = retention_limit
        self.clock = clock

    async def snapshot(self, note: Note, comment: str) -> UUID | None:
        """
        Record the current state of `note` as a new version, then prune.

        Must be called before the caller applies its mutation, so the snapshot
        holds the state being superseded.

        Best-effort: a storage failure, including a write timeout enforced by
        the store, is logged and None is returned. The caller's mutation
        proceeds either way.

        Args:
            note: The note, in its pre-mutation state.
            comment: Informational label, e.g. VersionComment.BEFORE_UPDATE.

        Returns:
            The new version id, or None if the snapshot could not be written.
        """
        try:
            version_id = await self._write_snapshot(note, comment)
        except StorageError as e:
            logger.warning(
                "Snapshot '%s' of note %s failed; continuing without it: %s",
                comment,
                note.id,
                e,
                exc_info=True,
            )
            return None

        await self.prune(note.id)
        return version_id

    async def prune(self, note_id: UUID, limit: int | None = None) -> int:
        """
        Delete the oldest versions of a note beyond the retention limit.

        Keeps the `limit` most recent versions by (saved_at, id). Running it
        again with no new snapshots deletes nothing. Storage failures are logged
        and swallowed; the next snapshot or the prune sweep task retries.

        Args:
            note_id: Note whose history is pruned.
            limit: Versions to keep. Defaults to the configured retention limit.

        Returns:
            Number of versions deleted (0 on no-op or failure).
        """
        if limit is None:
            limit = self.retention_limit
        if limit < 1:
            raise ValueError("limit must be at least 1")

        try:
            deleted = await self.version_store.prune_oldest(note_id, limit)
        except StorageError as e:
            logger.warning("Pruning versions of note %s failed: %s", note_id, e, exc_info=True)
            return 0

        if deleted:
            logger.info("Pruned %d version(s) of note %s (limit %d)", deleted, note_id, limit)
        return deleted

    async def list_versions(self, note_id: UUID, requester_id: UUID) -> list[NoteVersion]:
        """
        List a note's versions, newest first.

        Raises:
            NoteNotFoundError: The note does not exist.
            NoteAccessDeniedError: The requester does not own the note.
        """
        await get_owned_note(self.note_store, note_id, requester_id)
        return await self.version_store.list_by_note(note_id)

    async def get_version(
        self,
        note_id: UUID,
        version_id: UUID,
        requester_id: UUID,
    ) -> NoteVersion:
        """
        Get a single version of a note.

        Raises:
            NoteNotFoundError / VersionNotFoundError: Either id does not exist.
            NoteAccessDeniedError: The requester does not own the note.
            VersionMismatchError: The version belongs to a different note.
        """
        await get_owned_note(self.note_store, note_id, requester_id)
        version = await self.version_store.get_version(version_id)
        if version is None:
            raise VersionNotFoundError(version_id)
        if version.note_id != note_id:
            raise VersionMismatchError(note_id, version_id, version.note_id)
        return version

    async def restore(
        self,
        note_id: UUID,
        version_id: UUID,
        requester_id: UUID,
    ) -> RestoreResult:
        """
        Overwrite a note's content with a stored version, backing it up first.

        Steps, in order (a failure aborts the remaining steps):
        1. Snapshot the current state as "Backup before restore". Unlike
           snapshots taken for edits, this write is required: if it fails the
           restore is aborted and the error propagates.
        2. Prune the note's history.
        3. Copy the version's content fields onto the note. The note's id and
           owner never change.
        4. Persist the note.

        With a very small retention limit the backup itself may be pruned in
        step 2 when newer snapshots exist.

        Raises:
            NoteNotFoundError / VersionNotFoundError: Either id does not exist.
            NoteAccessDeniedError: The requester does not own the note.
            VersionMismatchError: The version belongs to a different note.
            StorageError: The backup (including a backup that timed out) or the
                note save failed.
        """
        note = await self.note_store.get_note(note_id)
        version = await self.version_store.get_version(version_id)
        if note is None:
            raise NoteNotFoundError(note_id)
        if version is None:
            raise VersionNotFoundError(version_id)
        if note.user_id != requester_id:
            raise NoteAccessDeniedError(note_id, requester_id)
        if version.note_id != note.id:
            raise VersionMismatchError(note_id, version_id, version.note_id)

        # Captured before pruning, which may delete the version being restored
        restored_fields = content_fields(version)

        backup_version_id = await self._write_snapshot(
            note, VersionComment.BACKUP_BEFORE_RESTORE,
        )
        await self.prune(note.id)

        for field, value in restored_fields.items():
            setattr(note, field, value)
        note = await self.note_store.save_note(note)

        logger.info(
            "Restored note %s to version %s (backup %s)",
            note.id,
            version_id,
            backup_version_id,
        )
        return RestoreResult(note=note, backup_version_id=backup_version_id)

    async def delete_history(self, note_id: UUID) -> int:
        """
        Delete every version of a note.

        Part of note deletion, so failures propagate.

        Returns:
            Number of versions deleted.
        """
        return await self.version_store.delete_for_note(note_id)

    async def _write_snapshot(self, note: Note, comment: str) -> UUID:
        version = NoteVersion(
            note_id=note.id,
            user_id=note.user_id,
            saved_at=self.clock(),
            comment=str(comment),
            **content_fields(note),
        )
        return await self.version_store.insert_version(version)
