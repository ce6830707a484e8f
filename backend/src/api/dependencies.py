"""FastAPI dependencies for injection."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import get_current_user
from core.config import Settings, get_settings
from db.session import get_async_session
from services.note_service import NoteService
from services.note_store import SqlNoteStore
from services.version_manager import VersionManager
from services.version_store import SqlVersionStore


def get_version_manager(
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> VersionManager:
    """Build a VersionManager bound to the request's database session."""
    return VersionManager(
        note_store=SqlNoteStore(db),
        version_store=SqlVersionStore(db, write_timeout=settings.snapshot_timeout_seconds),
        retention_limit=settings.version_retention_limit,
    )


def get_note_service(
    version_manager: VersionManager = Depends(get_version_manager),
    settings: Settings = Depends(get_settings),
) -> NoteService:
    """Build a NoteService sharing the request's VersionManager and stores."""
    return NoteService(
        note_store=version_manager.note_store,
        version_manager=version_manager,
        max_attachments=settings.max_attachments_per_note,
        max_title_length=settings.max_title_length,
    )


__all__ = [
    "get_async_session",
    "get_current_user",
    "get_note_service",
    "get_settings",
    "get_version_manager",
]
