"""
Key-value persistence for the two records the service keeps: the event
settings and the ticket list. Values are stored as JSON documents in the
``key_value_entries`` table.
"""

import copy
from typing import Any

from loguru import logger
from sqlalchemy.orm import Session

from src.models import KeyValueEntry

TICKETS_KEY = "entry_tickets_v1"
SETTINGS_KEY = "entry_settings_v1"


class KeyValueStore:
    """Thin JSON get/put API over a SQLAlchemy session"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def load_json(self, key: str, fallback: Any = None) -> Any:
        """Return the stored value for ``key`` or ``fallback`` if there is none"""
        entry = self.db.get(KeyValueEntry, key)
        if entry is None or entry.value is None:
            return fallback
        # Callers may mutate what they get back; keep the session copy untouched
        return copy.deepcopy(entry.value)
    
    def save_json(self, key: str, value: Any) -> None:
        """Insert or replace the value stored under ``key`` and commit"""
        entry = self.db.get(KeyValueEntry, key)
        if entry is None:
            entry = KeyValueEntry(key=key, value=value)
            self.db.add(entry)
        else:
            entry.value = value
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(f"Failed to persist key {key}")
            raise
