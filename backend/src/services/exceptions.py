"""Shared exceptions for service layer operations."""
from uuid import UUID


class NotFoundError(Exception):
    """Base exception for ids that do not resolve to an existing record."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class NoteNotFoundError(NotFoundError):
    """Raised when a note id does not exist."""

    def __init__(self, note_id: UUID) -> None:
        self.note_id = note_id
        super().__init__(f"Note not found: {note_id}")


class VersionNotFoundError(NotFoundError):
    """Raised when a version id does not exist."""

    def __init__(self, version_id: UUID) -> None:
        self.version_id = version_id
        super().__init__(f"Version not found: {version_id}")


class AttachmentNotFoundError(NotFoundError):
    """Raised when an attachment index is out of range for a note."""

    def __init__(self, note_id: UUID, index: int) -> None:
        self.note_id = note_id
        self.index = index
        super().__init__(f"Attachment {index} not found on note {note_id}")


class AttachmentLimitExceededError(Exception):
    """Raised when a note would hold more attachments than allowed."""

    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(f"Too many attachments: {count} (maximum {limit})")


class NoteAccessDeniedError(Exception):
    """
    Raised when the requester is not the owner of the note.

    This is a terminal authorization failure. It is never downgraded to a
    silent no-op.
    """

    def __init__(self, note_id: UUID, requester_id: UUID) -> None:
        self.note_id = note_id
        self.requester_id = requester_id
        super().__init__(f"User {requester_id} is not allowed to access note {note_id}")


class VersionMismatchError(Exception):
    """Raised when a version is restored onto a note it does not belong to."""

    def __init__(self, note_id: UUID, version_id: UUID, version_note_id: UUID) -> None:
        self.note_id = note_id
        self.version_id = version_id
        self.version_note_id = version_note_id
        super().__init__(
            f"Version {version_id} belongs to note {version_note_id}, not {note_id}",
        )


class StorageError(Exception):
    """
    Raised when the persistence layer rejects a read or write.

    Stores wrap driver/ORM errors in this type so callers can tell storage
    failures apart from programming errors. The original error is chained.
    """

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


class TitleTooLongError(Exception):
    """Raised when a note title exceeds the configured maximum length."""

    def __init__(self, length: int, limit: int) -> None:
        self.length = length
        self.limit = limit
        super().__init__(f"Title too long: {length} characters (maximum {limit})")
