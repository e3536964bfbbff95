from pydantic import BaseModel, Field
from datetime import datetime

class Slot(BaseModel):
    """Fixed-duration entry window"""
    id: str = Field(..., description="{date}-{ordinal:03d}, stable for identical settings")
    label: str = Field(..., description="Wall-clock range, HH:MM-HH:MM")
    start_time: datetime
    end_time: datetime

class SlotAvailability(Slot):
    """Slot with its booking state at a point in time"""
    capacity: int
    booked: int
    remaining: int
    is_full: bool
    is_past: bool
    is_available: bool
