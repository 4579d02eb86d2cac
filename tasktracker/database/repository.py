"""Repository layer for database operations."""

import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from tasktracker.database.models import KeyValueDB

logger = logging.getLogger(__name__)


class KeyValueRepository:
    """Repository for key-value database operations."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[str]:
        """Get the stored value for a key (None if absent)."""
        row = self.db.query(KeyValueDB).filter(KeyValueDB.key == key).first()
        return row.value if row else None

    def set(self, key: str, value: str) -> None:
        """Create or overwrite the value for a key."""
        try:
            row = self.db.query(KeyValueDB).filter(KeyValueDB.key == key).first()
            if row is None:
                self.db.add(KeyValueDB(key=key, value=value, updated_at=datetime.utcnow()))
            else:
                row.value = value
                row.updated_at = datetime.utcnow()
            self.db.commit()
            logger.debug(f"Stored key {key} ({len(value)} chars)")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to store key {key}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, key: str) -> bool:
        """Delete a key. Returns False if it was not present."""
        row = self.db.query(KeyValueDB).filter(KeyValueDB.key == key).first()
        if not row:
            return False

        try:
            self.db.delete(row)
            self.db.commit()
            logger.debug(f"Deleted key {key}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete key {key}: {type(e).__name__}: {str(e)}")
            raise
