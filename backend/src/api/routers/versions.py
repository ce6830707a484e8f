"""Version history endpoints for browsing and restoring notes."""
from uuid import UUID

from fastapi import APIRouter, Depends

from api.dependencies import get_current_user, get_version_manager
from models.user import User
from schemas.note import NoteResponse
from schemas.note_version import (
    NoteVersionListResponse,
    NoteVersionResponse,
    RestoreResponse,
)
from services.version_manager import VersionManager

router = APIRouter(prefix="/notes", tags=["versions"])


@router.get("/{note_id}/versions", response_model=NoteVersionListResponse)
async def list_note_versions(
    note_id: UUID,
    current_user: User = Depends(get_current_user),
    version_manager: VersionManager = Depends(get_version_manager),
) -> NoteVersionListResponse:
    """
    Get the version history of a note, newest first.

    Returns:
    - 200 with the stored versions (at most the retention limit)
    - 403 if the note belongs to another user
    - 404 if the note does not exist (including after it was deleted)
    """
    versions = await version_manager.list_versions(note_id, current_user.id)
    return NoteVersionListResponse(
        items=[NoteVersionResponse.model_validate(v) for v in versions],
        total=len(versions),
        retention_limit=version_manager.retention_limit,
    )


@router.get("/{note_id}/versions/{version_id}", response_model=NoteVersionResponse)
async def get_note_version(
    note_id: UUID,
    version_id: UUID,
    current_user: User = Depends(get_current_user),
    version_manager: VersionManager = Depends(get_version_manager),
) -> NoteVersionResponse:
    """Get a single stored version of a note."""
    version = await version_manager.get_version(note_id, version_id, current_user.id)
    return NoteVersionResponse.model_validate(version)


@router.post(
    "/{note_id}/versions/{version_id}/restore",
    response_model=RestoreResponse,
)
async def restore_note_version(
    note_id: UUID,
    version_id: UUID,
    current_user: User = Depends(get_current_user),
    version_manager: VersionManager = Depends(get_version_manager),
) -> RestoreResponse:
    """
    Restore a note to a previous version.

    The current state is saved as a "Backup before restore" version first, so
    the overwritten content stays recoverable.

    Returns:
    - 200 with the restored note
    - 400 if the version belongs to a different note
    - 403 if the note belongs to another user
    - 404 if the note or version does not exist
    """
    result = await version_manager.restore(note_id, version_id, current_user.id)
    return RestoreResponse(
        message="Restored successfully",
        restored_version_id=version_id,
        backup_version_id=result.backup_version_id,
        note=NoteResponse.model_validate(result.note),
    )
