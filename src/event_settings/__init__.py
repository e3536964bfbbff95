"""
Event Settings Module

Holds the single mutable settings record of the event: title, location,
slot length, capacity per slot, reminder lead time, admin PIN and the
schedule (date, opening and closing time). Changes are partial merges and
are persisted immediately.
"""

from .router import router
from .service import SettingsStore, default_event_settings
from .schemas import (
    EventSettings, EventSettingsUpdate, PublicEventSettings, ScheduleConfig, ScheduleUpdate
)

__all__ = [
    "router",
    "SettingsStore",
    "default_event_settings",
    "EventSettings",
    "EventSettingsUpdate",
    "PublicEventSettings",
    "ScheduleConfig",
    "ScheduleUpdate"
]
