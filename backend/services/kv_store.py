import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from backend.database import SessionLocal
from backend.errors import PersistenceError
from backend.models.kv_entry import KeyValueEntry

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Text blobs under stable keys, kept in the ``kv_store`` table."""

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        db = self._session_factory()
        try:
            entry = db.get(KeyValueEntry, key)
            return entry.value if entry else None
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not read '{key}' from storage") from exc
        finally:
            db.close()

    def set(self, key: str, value: str) -> None:
        db = self._session_factory()
        try:
            entry = db.get(KeyValueEntry, key)
            if entry is None:
                entry = KeyValueEntry(key=key, value=value)
            else:
                entry.value = value
                entry.updated_at = datetime.utcnow()
            db.add(entry)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Failed to write '%s' to storage: %s", key, exc)
            raise PersistenceError(f"Could not save '{key}' to storage") from exc
        finally:
            db.close()
