"""User endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.dependencies import get_current_user, get_note_service
from models.user import User
from services.note_service import NoteService


router = APIRouter(prefix="/users", tags=["users"])


class UserResponse(BaseModel):
    """The authenticated user and how many notes they own."""

    id: UUID
    external_id: str
    email: str | None
    note_count: int


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: User = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
) -> UserResponse:
    """Get the current authenticated user's info. Useful for checking a token."""
    notes = await note_service.list_for_user(current_user.id)
    return UserResponse(
        id=current_user.id,
        external_id=current_user.external_id,
        email=current_user.email,
        note_count=len(notes),
    )
