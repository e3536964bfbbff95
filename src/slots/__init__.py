"""
Slots Module

Derives the ordered list of fixed-duration entry slots from the event
schedule and reports per-slot availability against the capacity ceiling.

Key Components:
- service.py: slot builder and availability calculation
- router.py: FastAPI endpoint listing the slots
- schemas.py: Pydantic models for slots
"""

from .router import router
from .service import SlotService, build_slots, build_slots_for_settings, find_slot
from .schemas import Slot, SlotAvailability

__all__ = [
    "router",
    "SlotService",
    "build_slots",
    "build_slots_for_settings",
    "find_slot",
    "Slot",
    "SlotAvailability"
]
