"""
Record store port and its SQLAlchemy implementation.

A record store persists bobinas and enforces uniqueness of the code field.
It signals a duplicate with errors.UniqueViolation, an unreachable backend
with errors.TransportError, and a missing id by returning None / False.
"""
import logging
from typing import Any, Dict, List, Optional, Protocol
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import crud, errors, schemas

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    def list_records(self) -> List[schemas.Bobina]: ...

    def get(self, bobina_id: str) -> Optional[schemas.Bobina]: ...

    def insert(self, data: Dict[str, Any]) -> schemas.Bobina: ...

    def update(self, bobina_id: str, data: Dict[str, Any]) -> Optional[schemas.Bobina]: ...

    def set_photo(self, bobina_id: str, photo_url: Optional[str]) -> Optional[schemas.Bobina]: ...

    def delete(self, bobina_id: str) -> bool: ...


def is_unique_violation(exc: IntegrityError) -> bool:
    """Recognise a unique constraint failure from Postgres or SQLite."""
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == errors.UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(orig)


class SqlRecordStore:
    """RecordStore backed by the bobinas table through a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def _write(self, operation, *args):
        try:
            return operation(self.db, *args)
        except IntegrityError as e:
            self.db.rollback()
            if is_unique_violation(e):
                raise errors.UniqueViolation("bobinas_code_key", str(e.orig)) from e
            logger.error(f"Integrity error writing bobina: {e.orig}")
            raise errors.TransportError(f"Database rejected the write: {e.orig}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error writing bobina: {e}")
            raise errors.TransportError(f"Database error: {e}") from e
        except Exception:
            # Leave the session usable for the next request
            self.db.rollback()
            raise

    def list_records(self) -> List[schemas.Bobina]:
        try:
            rows = crud.get_bobinas(self.db)
        except SQLAlchemyError as e:
            logger.error(f"Database error listing bobinas: {e}")
            raise errors.TransportError(f"Database error: {e}") from e
        return [schemas.Bobina.model_validate(row) for row in rows]

    def get(self, bobina_id: str) -> Optional[schemas.Bobina]:
        try:
            row = crud.get_bobina(self.db, bobina_id)
        except SQLAlchemyError as e:
            logger.error(f"Database error reading bobina {bobina_id}: {e}")
            raise errors.TransportError(f"Database error: {e}") from e
        return schemas.Bobina.model_validate(row) if row is not None else None

    def insert(self, data: Dict[str, Any]) -> schemas.Bobina:
        row = self._write(crud.create_bobina, data)
        return schemas.Bobina.model_validate(row)

    def update(self, bobina_id: str, data: Dict[str, Any]) -> Optional[schemas.Bobina]:
        row = self._write(crud.update_bobina, bobina_id, data)
        return schemas.Bobina.model_validate(row) if row is not None else None

    def set_photo(self, bobina_id: str, photo_url: Optional[str]) -> Optional[schemas.Bobina]:
        row = self._write(crud.set_bobina_photo, bobina_id, photo_url)
        return schemas.Bobina.model_validate(row) if row is not None else None

    def delete(self, bobina_id: str) -> bool:
        return self._write(crud.delete_bobina, bobina_id)
