"""Shared utility functions for service layer."""
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from services.exceptions import StorageError


@contextmanager
def storage_errors(operation: str) -> Generator[None]:
    """
    Translate SQLAlchemy errors raised inside the block into StorageError.

    Usage:
        with storage_errors("insert_version"):
            await db.flush()
    """
    try:
        yield
    except SQLAlchemyError as e:
        raise StorageError(operation, str(e)) from e
