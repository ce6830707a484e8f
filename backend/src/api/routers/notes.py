"""Notes CRUD endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from api.dependencies import get_current_user, get_note_service
from models.user import User
from schemas.note import (
    NoteCreate,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    PinUpdate,
    ReminderUpdate,
)
from services.note_service import NoteService

router = APIRouter(prefix="/notes", tags=["notes"])


@router.post("/", response_model=NoteResponse, status_code=201)
async def create_note(
    data: NoteCreate,
    current_user: User = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    """Create a new note. Its initial state is recorded as the first version."""
    note = await note_service.create(current_user.id, data)
    return NoteResponse.model_validate(note)


@router.get("/", response_model=NoteListResponse)
async def list_notes(
    current_user: User = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> NoteListResponse:
    """List the current user's notes, pinned notes first, then newest first."""
    notes = await note_service.list_for_user(current_user.id)
    return NoteListResponse(
        items=[NoteResponse.model_validate(n) for n in notes],
        total=len(notes),
    )


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: UUID,
    current_user: User = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    """Get a single note by ID."""
    note = await note_service.get(current_user.id, note_id)
    return NoteResponse.model_validate(note)


@router.patch("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: UUID,
    data: NoteUpdate,
    current_user: User = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    """
    Partially update a note.

    Only fields present in the body change. `reminder_at`, `tag` and
    `primary_image` can be cleared with an explicit null. The state before the
    update is saved to the note's version history.
    """
    note = await note_service.update(current_user.id, note_id, data)
    return NoteResponse.model_validate(note)


@router.put("/{note_id}/pin", response_model=NoteResponse)
async def set_note_pinned(
    note_id: UUID,
    data: PinUpdate,
    current_user: User = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    """Pin or unpin a note."""
    note = await note_service.set_pinned(current_user.id, note_id, data.is_pinned)
    return NoteResponse.model_validate(note)


@router.put("/{note_id}/reminder", response_model=NoteResponse)
async def set_note_reminder(
    note_id: UUID,
    data: ReminderUpdate,
    current_user: User = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    """Set a note's reminder time, or clear it with null."""
    note = await note_service.set_reminder(current_user.id, note_id, data.reminder_at)
    return NoteResponse.model_validate(note)


@router.delete("/{note_id}/attachments/{index}", response_model=NoteResponse)
async def remove_note_attachment(
    note_id: UUID,
    index: int = Path(..., ge=0, description="Position of the attachment (0-based)"),
    current_user: User = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    """Remove one attachment from a note."""
    note = await note_service.remove_attachment(current_user.id, note_id, index)
    return NoteResponse.model_validate(note)


@router.delete("/{note_id}", status_code=204)
async def delete_note(
    note_id: UUID,
    current_user: User = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> None:
    """Delete a note together with its entire version history."""
    await note_service.delete(current_user.id, note_id)
