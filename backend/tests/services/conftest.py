"""
In-memory stores for exercising the version manager and note service without a database.

The stores follow the NoteStore / VersionStore protocols, including id
assignment and (saved_at, id) ordering, and can be told to fail specific
operations to simulate storage outages.
"""
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest
from uuid6 import uuid7

from models.note import Note
from models.note_version import NoteVersion
from services.exceptions import StorageError
from services.note_service import NoteService
from services.version_manager import VersionManager


class TickingClock:
    """Clock that advances one second per call, so saved_at is strictly increasing."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


class FrozenClock:
    """Clock that always returns the same instant, to force saved_at ties."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now


class InMemoryNoteStore:
    """NoteStore holding notes in a dict."""

    def __init__(self, clock: TickingClock) -> None:
        self.notes: dict[UUID, Note] = {}
        self.clock = clock
        self.fail_on: set[str] = set()

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise StorageError(operation, "simulated outage")

    async def get_note(self, note_id: UUID) -> Note | None:
        self._check("get_note")
        return self.notes.get(note_id)

    async def list_notes(self, user_id: UUID) -> list[Note]:
        self._check("list_notes")
        notes = [n for n in self.notes.values() if n.user_id == user_id]
        return sorted(notes, key=lambda n: (n.is_pinned, n.created_at, n.id), reverse=True)

    async def save_note(self, note: Note) -> Note:
        self._check("save_note")
        now = self.clock()
        if note.id is None:
            note.id = uuid7()
            note.created_at = now
        note.updated_at = now
        self.notes[note.id] = note
        return note

    async def delete_note(self, note_id: UUID) -> None:
        self._check("delete_note")
        self.notes.pop(note_id, None)


class InMemoryVersionStore:
    """VersionStore holding snapshots in a dict."""

    def __init__(self) -> None:
        self.versions: dict[UUID, NoteVersion] = {}
        self.fail_on: set[str] = set()

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise StorageError(operation, "simulated outage")

    def _ordered(self, note_id: UUID) -> list[NoteVersion]:
        rows = [v for v in self.versions.values() if v.note_id == note_id]
        return sorted(rows, key=lambda v: (v.saved_at, v.id))

    async def insert_version(self, version: NoteVersion) -> UUID:
        self._check("insert_version")
        if version.id is None:
            version.id = uuid7()
        self.versions[version.id] = version
        return version.id

    async def get_version(self, version_id: UUID) -> NoteVersion | None:
        self._check("get_version")
        return self.versions.get(version_id)

    async def count_versions(self, note_id: UUID) -> int:
        self._check("count_versions")
        return len(self._ordered(note_id))

    async def list_oldest(self, note_id: UUID, n: int) -> list[UUID]:
        self._check("list_oldest")
        if n <= 0:
            return []
        return [v.id for v in self._ordered(note_id)[:n]]

    async def list_by_note(self, note_id: UUID) -> list[NoteVersion]:
        self._check("list_by_note")
        return list(reversed(self._ordered(note_id)))

    async def prune_oldest(self, note_id: UUID, keep: int) -> int:
        self._check("prune_oldest")
        stale = self._ordered(note_id)[:-keep] if keep > 0 else self._ordered(note_id)
        for version in stale:
            del self.versions[version.id]
        return len(stale)

    async def delete_versions(self, version_ids: Sequence[UUID]) -> int:
        self._check("delete_versions")
        return sum(1 for vid in version_ids if self.versions.pop(vid, None) is not None)

    async def delete_for_note(self, note_id: UUID) -> int:
        self._check("delete_for_note")
        ids = [v.id for v in self._ordered(note_id)]
        return await self.delete_versions(ids)


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def note_store(clock: TickingClock) -> InMemoryNoteStore:
    return InMemoryNoteStore(clock)


@pytest.fixture
def version_store() -> InMemoryVersionStore:
    return InMemoryVersionStore()


@pytest.fixture
def version_manager(
    note_store: InMemoryNoteStore,
    version_store: InMemoryVersionStore,
    clock: TickingClock,
) -> VersionManager:
    return VersionManager(note_store, version_store, retention_limit=10, clock=clock)


@pytest.fixture
def note_service(
    note_store: InMemoryNoteStore,
    version_manager: VersionManager,
) -> NoteService:
    return NoteService(note_store, version_manager, max_attachments=10)


@pytest.fixture
def owner_id() -> UUID:
    return uuid7()


@pytest.fixture
def other_user_id() -> UUID:
    return uuid7()
