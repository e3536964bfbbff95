"""
Ticket Issuing Module

This module issues and manages numbered entry tickets. It includes:

- Identifier generation (5 letters + 3 digits, unique within the registry)
- The ticket registry: create, remove, filtered listing, bulk replacement
- Per-slot capacity counting
- CSV export and import
- Calendar (ICS) export and QR codes for issued tickets
- Cancellable entry reminders

Key Components:
- registry.py: ticket registry and capacity counter
- identifiers.py: ticket identifier generator
- csv_service.py: CSV export/import
- calendar_service.py: iCalendar rendering
- qr_service.py: QR code images
- reminder_service.py: reminder timers keyed by ticket id
- router.py: FastAPI endpoints for visitors
- schemas.py: Pydantic models for tickets
"""

from .router import router
from .registry import TicketRegistry, count_tickets_for_slot, counts_by_slot
from .identifiers import generate_ticket_id, is_ticket_id
from .reminder_service import ReminderScheduler, reminder_scheduler
from .exceptions import (
    TicketingError, ValidationError, CapacityError, ImportParseError
)
from .schemas import Ticket, TicketCreateRequest, TicketImportResult, ReminderStatus

__all__ = [
    "router",
    "TicketRegistry",
    "count_tickets_for_slot",
    "counts_by_slot",
    "generate_ticket_id",
    "is_ticket_id",
    "ReminderScheduler",
    "reminder_scheduler",
    "TicketingError",
    "ValidationError",
    "CapacityError",
    "ImportParseError",
    "Ticket",
    "TicketCreateRequest",
    "TicketImportResult",
    "ReminderStatus"
]
