"""Pydantic schemas for note endpoints."""
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Attachment(BaseModel):
    """Descriptor of a stored file attached to a note."""

    path: str = Field(min_length=1, max_length=1024)
    original_name: str = Field(min_length=1, max_length=255)
    media_type: str = Field(default="application/octet-stream", max_length=255)
    byte_size: int = Field(default=0, ge=0)


class PrimaryImage(BaseModel):
    """The single distinguished image of a note (not part of attachments)."""

    path: str = Field(min_length=1, max_length=1024)
    original_name: str = Field(min_length=1, max_length=255)


def _normalize_reminder(value: Any) -> Any:
    """Treat an empty string as "no reminder" and naive datetimes as UTC."""
    if isinstance(value, str) and not value.strip():
        return None
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class NoteCreate(BaseModel):
    """Schema for creating a new note."""

    title: str = Field(max_length=500)
    description: str = ""  # Rich-text markup
    tag: str | None = Field(default=None, max_length=100)
    primary_image: PrimaryImage | None = None
    attachments: list[Attachment] = Field(default_factory=list)
    is_pinned: bool = False
    reminder_at: datetime | None = Field(
        default=None,
        description="Reminder time. Accepts ISO 8601; naive values are treated as UTC.",
    )

    @field_validator("title")
    @classmethod
    def check_title_not_empty(cls, v: str) -> str:
        """Validate title is not empty."""
        if not v or not v.strip():
            raise ValueError("Title cannot be empty")
        return v

    @field_validator("reminder_at", mode="before")
    @classmethod
    def normalize_reminder(cls, v: Any) -> Any:
        """Empty string means no reminder."""
        return _normalize_reminder(v)

    @field_validator("reminder_at")
    @classmethod
    def ensure_reminder_timezone(cls, v: datetime | None) -> datetime | None:
        """Store reminders as timezone-aware datetimes."""
        return _normalize_reminder(v)


class NoteUpdate(BaseModel):
    """
    Schema for partially updating a note.

    Only fields present in the request are changed. For `reminder_at`, `tag`
    and `primary_image`, an explicit null clears the value, which is distinct
    from omitting the field. `reminder_at` also accepts "" as a clear.
    """

    title: str | None = Field(default=None, max_length=500)
    description: str | None = None
    tag: str | None = Field(default=None, max_length=100)
    primary_image: PrimaryImage | None = Field(
        default=None,
        description="Omit to leave unchanged; set to null to remove the image.",
    )
    attachments: list[Attachment] | None = Field(
        default=None,
        description="Replaces the whole attachments list when provided.",
    )
    is_pinned: bool | None = None
    reminder_at: datetime | None = Field(
        default=None,
        description="Omit to leave unchanged; set to null or \"\" to clear the reminder.",
    )

    @field_validator("title", "description", "attachments", "is_pinned")
    @classmethod
    def reject_explicit_null(cls, v: Any) -> Any:
        """These fields can be changed but not cleared."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("title")
    @classmethod
    def check_title_not_empty(cls, v: str) -> str:
        """Validate title is not empty (if provided)."""
        if not v.strip():
            raise ValueError("Title cannot be empty")
        return v

    @field_validator("reminder_at", mode="before")
    @classmethod
    def normalize_reminder(cls, v: Any) -> Any:
        """Empty string clears the reminder."""
        return _normalize_reminder(v)

    @field_validator("reminder_at")
    @classmethod
    def ensure_reminder_timezone(cls, v: datetime | None) -> datetime | None:
        """Store reminders as timezone-aware datetimes."""
        return _normalize_reminder(v)

    def to_column_values(self) -> dict[str, Any]:
        """
        Map the explicitly-set fields to Note column values.

        The primary image is split into its two columns; null clears both.
        Attachments are stored as complete descriptors, defaults included.
        """
        values = self.model_dump(exclude_unset=True)
        if "attachments" in values:
            values["attachments"] = [a.model_dump() for a in self.attachments]
        if "primary_image" in values:
            image = values.pop("primary_image")
            values["image_path"] = image["path"] if image else None
            values["image_original_name"] = image["original_name"] if image else None
        return values


class PinUpdate(BaseModel):
    """Schema for pinning or unpinning a note."""

    is_pinned: bool


class ReminderUpdate(BaseModel):
    """Schema for setting or clearing a note's reminder."""

    reminder_at: datetime | None = Field(
        description="Reminder time, or null/\"\" to clear it.",
    )

    @field_validator("reminder_at", mode="before")
    @classmethod
    def normalize_reminder(cls, v: Any) -> Any:
        """Empty string clears the reminder."""
        return _normalize_reminder(v)

    @field_validator("reminder_at")
    @classmethod
    def ensure_reminder_timezone(cls, v: datetime | None) -> datetime | None:
        """Store reminders as timezone-aware datetimes."""
        return _normalize_reminder(v)


class NoteContentResponse(BaseModel):
    """
    Content fields shared by notes and their versions.

    Uses model_validator to fold the image_path/image_original_name columns
    into a single `primary_image` object.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    title: str
    description: str
    tag: str | None
    primary_image: PrimaryImage | None = None
    attachments: list[Attachment]
    is_pinned: bool
    reminder_at: datetime | None

    @model_validator(mode="before")
    @classmethod
    def extract_from_sqlalchemy(cls, data: Any) -> Any:
        """Extract schema fields from a SQLAlchemy model, building primary_image."""
        if hasattr(data, "__dict__") and not isinstance(data, BaseModel):
            field_names = set(cls.model_fields.keys()) - {"primary_image"}
            data_dict = {key: getattr(data, key) for key in field_names if hasattr(data, key)}
            image_path = getattr(data, "image_path", None)
            data_dict["primary_image"] = (
                {"path": image_path, "original_name": data.image_original_name or image_path}
                if image_path
                else None
            )
            return data_dict
        return data


class NoteResponse(NoteContentResponse):
    """Schema for a note."""

    created_at: datetime
    updated_at: datetime


class NoteListResponse(BaseModel):
    """Schema for the list of a user's notes."""

    items: list[NoteResponse]
    total: int
