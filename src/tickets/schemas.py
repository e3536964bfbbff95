from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

# Ticket Models
class Ticket(BaseModel):
    """Issued numbered ticket; slot bounds are copied at creation time"""
    id: str = Field(..., description="5 uppercase letters followed by 3 digits")
    name: str
    contact: str = ""
    slot_id: str
    slot_start: datetime
    slot_end: datetime
    created_at: datetime
    notified: bool = False
    
    @property
    def slot_label(self) -> str:
        return f"{self.slot_start.strftime('%H:%M')}-{self.slot_end.strftime('%H:%M')}"

class TicketCreateRequest(BaseModel):
    """Request to issue a ticket for a slot"""
    name: str = Field(..., max_length=100)
    contact: Optional[str] = Field("", max_length=200, description="Optional phone/class memo")
    slot_id: str

# Import / Reminder Responses
class TicketImportResult(BaseModel):
    """Outcome of a CSV import"""
    imported: int
    reassigned: int = Field(0, description="Rows whose slot_id was unknown and moved to the first slot")
    generated_ids: int = Field(0, description="Rows that received a new ticket id")
    warnings: List[str] = []

class ReminderStatus(BaseModel):
    """Whether an entry reminder is armed for a ticket"""
    ticket_id: str
    scheduled: bool
    fire_at: Optional[datetime] = None
    reminder_minutes_before: int
    message: str
