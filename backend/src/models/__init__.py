"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.user import User
from models.note import Note
from models.note_version import NoteVersion, VersionComment

__all__ = [
    "Base",
    "Note",
    "NoteVersion",
    "TimestampMixin",
    "UUIDv7Mixin",
    "User",
    "VersionComment",
]
