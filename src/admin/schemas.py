from pydantic import BaseModel
from typing import Optional

class AdminLogin(BaseModel):
    """PIN submitted to unlock the admin panel"""
    pin: str

class AdminLoginResponse(BaseModel):
    authenticated: bool

class SlotBookingCount(BaseModel):
    """Tickets held for one slot id (current or stale)"""
    slot_id: str
    label: Optional[str] = None
    booked: int
    capacity: int
    is_current: bool

class TicketRemovalResult(BaseModel):
    ticket_id: str
    removed: bool
