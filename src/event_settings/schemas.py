from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime

MIN_SLOT_MINUTES = 5
MIN_SLOT_CAPACITY = 1
MIN_REMINDER_MINUTES = 1

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

def _check_date(value: str) -> str:
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise ValueError("date must use the YYYY-MM-DD format")
    return value

def _check_time(value: str) -> str:
    try:
        datetime.strptime(value, TIME_FORMAT)
    except ValueError:
        raise ValueError("time must use the HH:MM format")
    return value

# Schedule
class ScheduleConfig(BaseModel):
    """Day and opening hours the slots are carved from"""
    date: str = Field(..., description="Event day, YYYY-MM-DD")
    start: str = Field(..., description="First slot start, HH:MM")
    end: str = Field(..., description="Closing time, HH:MM")
    
    @validator('date')
    def validate_date(cls, v):
        return _check_date(v)
    
    @validator('start', 'end')
    def validate_times(cls, v):
        return _check_time(v)

class ScheduleUpdate(BaseModel):
    """Partial schedule change; unset fields keep their current value"""
    date: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    
    @validator('date')
    def validate_date(cls, v):
        return v if v is None else _check_date(v)
    
    @validator('start', 'end')
    def validate_times(cls, v):
        return v if v is None else _check_time(v)

# Event Settings
class PublicEventSettings(BaseModel):
    """Settings visible to visitors (no admin PIN)"""
    event_title: str
    location: str = ""
    slot_minutes: int
    slot_capacity: int
    reminder_minutes_before: int
    schedule: ScheduleConfig

class EventSettings(PublicEventSettings):
    """The single persisted settings record"""
    admin_pin: str
    
    @validator('slot_minutes')
    def clamp_slot_minutes(cls, v):
        return max(MIN_SLOT_MINUTES, v)
    
    @validator('slot_capacity')
    def clamp_slot_capacity(cls, v):
        return max(MIN_SLOT_CAPACITY, v)
    
    @validator('reminder_minutes_before')
    def clamp_reminder_minutes(cls, v):
        return max(MIN_REMINDER_MINUTES, v)

class EventSettingsUpdate(BaseModel):
    """Partial settings change merged into the stored record"""
    event_title: Optional[str] = None
    location: Optional[str] = None
    slot_minutes: Optional[int] = None
    slot_capacity: Optional[int] = None
    reminder_minutes_before: Optional[int] = None
    admin_pin: Optional[str] = Field(None, min_length=1)
    schedule: Optional[ScheduleUpdate] = None
