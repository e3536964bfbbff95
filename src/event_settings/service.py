from typing import Any, Dict, Optional
from datetime import datetime, date
from sqlalchemy.orm import Session
from loguru import logger
import pydantic

from src.config import settings as app_settings
from src.storage import KeyValueStore, SETTINGS_KEY
from src.event_settings.schemas import (
    EventSettings, EventSettingsUpdate, PublicEventSettings, ScheduleConfig
)

def default_event_settings(today: Optional[date] = None) -> EventSettings:
    """Settings used until an admin saves their own (schedule defaults to today)"""
    
    today = today or datetime.now().date()
    
    return EventSettings(
        event_title=app_settings.DEFAULT_EVENT_TITLE,
        location=app_settings.DEFAULT_LOCATION,
        slot_minutes=app_settings.DEFAULT_SLOT_MINUTES,
        slot_capacity=app_settings.DEFAULT_SLOT_CAPACITY,
        reminder_minutes_before=app_settings.DEFAULT_REMINDER_MINUTES_BEFORE,
        admin_pin=app_settings.DEFAULT_ADMIN_PIN,
        schedule=ScheduleConfig(
            date=today.isoformat(),
            start=app_settings.DEFAULT_SCHEDULE_START,
            end=app_settings.DEFAULT_SCHEDULE_END
        )
    )

def merge_settings(base: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow merge of ``changes`` into ``base``; the schedule is merged field by field"""
    
    merged = {**base, **{k: v for k, v in changes.items() if k != "schedule"}}
    if changes.get("schedule"):
        merged["schedule"] = {**base.get("schedule", {}), **changes["schedule"]}
    return merged

class SettingsStore:
    """Service owning the single persisted event settings record"""
    
    def __init__(self, db: Session):
        self.db = db
        self.store = KeyValueStore(db)
    
    def get(self) -> EventSettings:
        """Current settings, falling back to defaults for anything missing or unreadable"""
        
        defaults = default_event_settings()
        raw = self.store.load_json(SETTINGS_KEY)
        
        if not isinstance(raw, dict):
            return defaults
        
        try:
            return EventSettings(**merge_settings(defaults.model_dump(), raw))
        except (pydantic.ValidationError, TypeError) as e:
            logger.warning(f"Stored settings are invalid, using defaults: {e}")
            return defaults
    
    def get_public(self) -> PublicEventSettings:
        return PublicEventSettings(**self.get().model_dump(exclude={"admin_pin"}))
    
    def update(self, changes: EventSettingsUpdate) -> EventSettings:
        """Merge a partial update into the stored record and persist it"""
        
        current = self.get()
        partial = changes.model_dump(exclude_unset=True, exclude_none=True)
        updated = EventSettings(**merge_settings(current.model_dump(), partial))
        
        self.store.save_json(SETTINGS_KEY, updated.model_dump(mode="json"))
        
        changed = sorted(k for k in partial if k != "admin_pin")
        if "admin_pin" in partial:
            changed.append("admin_pin (hidden)")
        logger.info(f"Event settings updated: {', '.join(changed) or 'no changes'}")
        
        return updated
