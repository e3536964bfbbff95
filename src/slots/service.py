from typing import Dict, List, Optional, Tuple
from datetime import datetime, timedelta
from sqlalchemy.orm import Session

from src.slots.schemas import Slot, SlotAvailability
from src.event_settings.schemas import EventSettings, DATE_FORMAT, TIME_FORMAT
from src.event_settings.service import SettingsStore

def parse_schedule_bounds(
    schedule_date: str,
    schedule_start: str,
    schedule_end: str
) -> Tuple[datetime, datetime]:
    """Combine the schedule day with its opening and closing times"""
    
    day = datetime.strptime(schedule_date, DATE_FORMAT).date()
    start = datetime.combine(day, datetime.strptime(schedule_start, TIME_FORMAT).time())
    end = datetime.combine(day, datetime.strptime(schedule_end, TIME_FORMAT).time())
    return start, end

def format_slot_label(start: datetime, end: datetime) -> str:
    return f"{start.strftime('%H:%M')}-{end.strftime('%H:%M')}"

def build_slots(
    schedule_date: str,
    schedule_start: str,
    schedule_end: str,
    slot_minutes: int
) -> List[Slot]:
    """Partition [start, end) of the schedule day into consecutive slots.
    
    Only whole slots are produced: a remainder shorter than ``slot_minutes``
    at the end of the day is dropped. An empty or inverted range yields no
    slots.
    """
    
    if slot_minutes <= 0:
        raise ValueError("slot_minutes must be positive")
    
    start, end = parse_schedule_bounds(schedule_date, schedule_start, schedule_end)
    step = timedelta(minutes=slot_minutes)
    
    slots = []
    cursor = start
    ordinal = 0
    
    while cursor + step <= end:
        slot_end = cursor + step
        slots.append(Slot(
            id=f"{schedule_date}-{ordinal:03d}",
            label=format_slot_label(cursor, slot_end),
            start_time=cursor,
            end_time=slot_end
        ))
        cursor = slot_end
        ordinal += 1
    
    return slots

def build_slots_for_settings(event_settings: EventSettings) -> List[Slot]:
    schedule = event_settings.schedule
    return build_slots(schedule.date, schedule.start, schedule.end, event_settings.slot_minutes)

def find_slot(slots: List[Slot], slot_id: str) -> Optional[Slot]:
    return next((s for s in slots if s.id == slot_id), None)

def is_slot_past(slot: Slot, now: datetime) -> bool:
    return slot.end_time < now

def slot_availability(
    slots: List[Slot],
    counts: Dict[str, int],
    capacity: int,
    now: datetime
) -> List[SlotAvailability]:
    """Attach booked/remaining counts and the full/past flags to each slot"""
    
    result = []
    for slot in slots:
        booked = counts.get(slot.id, 0)
        is_full = booked >= capacity
        is_past = is_slot_past(slot, now)
        result.append(SlotAvailability(
            **slot.model_dump(),
            capacity=capacity,
            booked=booked,
            remaining=max(capacity - booked, 0),
            is_full=is_full,
            is_past=is_past,
            is_available=not (is_full or is_past)
        ))
    return result

class SlotService:
    """Service exposing the current slot list built from the stored settings"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def get_slots(self) -> List[Slot]:
        return build_slots_for_settings(SettingsStore(self.db).get())
    
    def get_availability(self, now: Optional[datetime] = None) -> List[SlotAvailability]:
        """Current slots with their booking state"""
        # Import here to avoid circular imports
        from src.tickets.registry import TicketRegistry
        
        event_settings = SettingsStore(self.db).get()
        slots = build_slots_for_settings(event_settings)
        counts = TicketRegistry(self.db).counts_by_slot(slots)
        
        return slot_availability(slots, counts, event_settings.slot_capacity, now or datetime.now())
