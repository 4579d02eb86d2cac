"""SQLAlchemy database models for the task tracker."""

from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime

from tasktracker.database.database import Base


class KeyValueDB(Base):
    """Database model for one stored key-value entry.

    The whole task collection lives in a single row as a JSON text blob, the
    same shape the browser build keeps in localStorage.
    """

    __tablename__ = "key_value_store"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
