"""
Scheduled version pruning task.

Re-applies the retention limit to every note's version history. Pruning
normally happens right after each snapshot, but a prune that fails on the
request path is only logged; this sweep catches those notes. Designed to run
as a cron job (e.g., hourly).

Usage:
    python -m tasks.prune_versions
"""
import asyncio
import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from db.session import async_session_factory
from services.note_store import SqlNoteStore
from services.version_manager import VersionManager
from services.version_store import SqlVersionStore

logger = logging.getLogger(__name__)


@dataclass
class PruneStats:
    """Statistics from a prune sweep."""

    notes_pruned: int = 0
    versions_deleted: int = 0

    # Per-note breakdown for verification
    deleted_by_note: dict[UUID, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, int]:
        """Convert to simple dict for logging/return."""
        return {
            "notes_pruned": self.notes_pruned,
            "versions_deleted": self.versions_deleted,
        }


async def prune_all_notes(db: AsyncSession, retention_limit: int) -> PruneStats:
    """
    Prune every note holding more than `retention_limit` versions.

    Each note is pruned through VersionManager.prune, so a failure on one note
    is logged and the sweep moves on to the next.

    Args:
        db: Database session.
        retention_limit: Versions to keep per note.

    Returns:
        PruneStats with a per-note breakdown.
    """
    version_store = SqlVersionStore(db)
    manager = VersionManager(
        note_store=SqlNoteStore(db),
        version_store=version_store,
        retention_limit=retention_limit,
    )

    stats = PruneStats()
    for note_id in await version_store.list_notes_over_limit(retention_limit):
        deleted = await manager.prune(note_id)
        if deleted > 0:
            stats.deleted_by_note[note_id] = deleted
            stats.notes_pruned += 1
            stats.versions_deleted += deleted

    await db.commit()
    return stats


async def run_prune_sweep(
    db: AsyncSession | None = None,
    retention_limit: int | None = None,
) -> PruneStats:
    """
    Run the prune sweep.

    Args:
        db: Database session. If None, creates one from async_session_factory.
        retention_limit: Versions to keep per note. Defaults to the
            VERSION_RETENTION_LIMIT setting.

    Returns:
        PruneStats for the sweep.
    """
    if retention_limit is None:
        retention_limit = get_settings().version_retention_limit
    logger.info("Starting version prune sweep (limit %d)", retention_limit)

    if db is not None:
        stats = await prune_all_notes(db, retention_limit)
    else:
        async with async_session_factory() as session:
            stats = await prune_all_notes(session, retention_limit)

    logger.info("Version prune sweep complete: %s", stats.to_dict())
    return stats


def main() -> None:
    """Entry point for running the sweep as a script."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_prune_sweep())


if __name__ == "__main__":
    main()
