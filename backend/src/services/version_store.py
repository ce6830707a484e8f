"""Version Store: the pruned, append-only log of note snapshots."""
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Protocol
from uuid import UUID

from sqlalchemy import delete, func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from models.note_version import NoteVersion
from services.utils import storage_errors


class VersionStore(Protocol):
    """Interface the Version Manager uses to persist and query snapshots."""

    async def insert_version(self, version: NoteVersion) -> UUID:
        """Persist a new snapshot and return its id."""
        ...

    async def get_version(self, version_id: UUID) -> NoteVersion | None:
        """Return a single snapshot, or None if it does not exist."""
        ...

    async def count_versions(self, note_id: UUID) -> int:
        """Count snapshots for a note."""
        ...

    async def list_oldest(self, note_id: UUID, n: int) -> list[UUID]:
        """Return the ids of the n oldest snapshots, oldest first."""
        ...

    async def list_by_note(self, note_id: UUID) -> list[NoteVersion]:
        """Return all snapshots for a note, newest first."""
        ...

    async def prune_oldest(self, note_id: UUID, keep: int) -> int:
        """Delete all but the `keep` newest snapshots and return how many were removed."""
        ...

    async def delete_versions(self, version_ids: Sequence[UUID]) -> int:
        """Delete snapshots by id and return how many were removed."""
        ...

    async def delete_for_note(self, note_id: UUID) -> int:
        """Delete every snapshot of a note and return how many were removed."""
        ...


class SqlVersionStore:
    """
    VersionStore backed by an async SQLAlchemy session.

    Ordering is (saved_at, id). saved_at alone can tie when two snapshots are
    written within the same clock tick; the UUIDv7 id breaks the tie in
    insertion order.

    Snapshot inserts and prunes run inside a SAVEPOINT so a failed write rolls
    back only its own statements and leaves the request transaction usable for
    the primary note mutation.

    When `write_timeout` is set, those writes also run under a transaction-local
    Postgres `statement_timeout`. A statement that exceeds it is cancelled by the
    server and surfaces as StorageError; the savepoint rollback restores the
    previous timeout, so the primary mutation is not bounded by it.
    """

    def __init__(self, db: AsyncSession, write_timeout: float | None = None) -> None:
        self.db = db
        self.write_timeout = write_timeout

    @asynccontextmanager
    async def _savepoint(self) -> AsyncIterator[None]:
        async with self.db.begin_nested():
            if self.write_timeout is None:
                yield
                return
            previous = (
                await self.db.execute(text("SELECT current_setting('statement_timeout')"))
            ).scalar_one()
            await self._set_statement_timeout(f"{max(1, int(self.write_timeout * 1000))}ms")
            yield
            await self._set_statement_timeout(previous)

    async def _set_statement_timeout(self, value: str) -> None:
        await self.db.execute(
            text("SELECT set_config('statement_timeout', :value, true)"),
            {"value": value},
        )

    async def insert_version(self, version: NoteVersion) -> UUID:
        with storage_errors("insert_version"):
            async with self._savepoint():
                self.db.add(version)
                await self.db.flush()
        return version.id

    async def get_version(self, version_id: UUID) -> NoteVersion | None:
        with storage_errors("get_version"):
            result = await self.db.execute(
                select(NoteVersion).where(NoteVersion.id == version_id),
            )
            return result.scalar_one_or_none()

    async def count_versions(self, note_id: UUID) -> int:
        with storage_errors("count_versions"):
            stmt = (
                select(func.count())
                .select_from(NoteVersion)
                .where(NoteVersion.note_id == note_id)
            )
            return (await self.db.execute(stmt)).scalar_one()

    async def list_oldest(self, note_id: UUID, n: int) -> list[UUID]:
        if n <= 0:
            return []
        with storage_errors("list_oldest"):
            stmt = (
                select(NoteVersion.id)
                .where(NoteVersion.note_id == note_id)
                .order_by(NoteVersion.saved_at.asc(), NoteVersion.id.asc())
                .limit(n)
            )
            return list((await self.db.execute(stmt)).scalars().all())

    async def list_by_note(self, note_id: UUID) -> list[NoteVersion]:
        with storage_errors("list_by_note"):
            stmt = (
                select(NoteVersion)
                .where(NoteVersion.note_id == note_id)
                .order_by(NoteVersion.saved_at.desc(), NoteVersion.id.desc())
            )
            return list((await self.db.execute(stmt)).scalars().all())

    async def prune_oldest(self, note_id: UUID, keep: int) -> int:
        """
        Delete every snapshot of a note except the `keep` newest.

        Selecting and deleting happen in one statement inside one savepoint,
        so a failure leaves the request transaction usable.
        """
        stale = (
            select(NoteVersion.id)
            .where(NoteVersion.note_id == note_id)
            .order_by(NoteVersion.saved_at.desc(), NoteVersion.id.desc())
            .offset(keep)
        )
        with storage_errors("prune_oldest"):
            async with self._savepoint():
                result = await self.db.execute(
                    delete(NoteVersion).where(NoteVersion.id.in_(stale)),
                )
        return result.rowcount

    async def delete_versions(self, version_ids: Sequence[UUID]) -> int:
        if not version_ids:
            return 0
        with storage_errors("delete_versions"):
            async with self._savepoint():
                result = await self.db.execute(
                    delete(NoteVersion).where(NoteVersion.id.in_(list(version_ids))),
                )
        return result.rowcount

    async def delete_for_note(self, note_id: UUID) -> int:
        with storage_errors("delete_for_note"):
            result = await self.db.execute(
                delete(NoteVersion).where(NoteVersion.note_id == note_id),
            )
        return result.rowcount

    async def list_notes_over_limit(self, limit: int) -> list[UUID]:
        """Return ids of notes holding more than `limit` snapshots."""
        with storage_errors("list_notes_over_limit"):
            stmt = (
                select(NoteVersion.note_id)
                .group_by(NoteVersion.note_id)
                .having(func.count() > limit)
            )
            return list((await self.db.execute(stmt)).scalars().all())
