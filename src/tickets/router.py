from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import List
from loguru import logger

from src.database import get_db
from src.event_settings.service import SettingsStore
from src.tickets.schemas import Ticket, TicketCreateRequest, ReminderStatus
from src.tickets.registry import TicketRegistry
from src.tickets.calendar_service import make_ics
from src.tickets.qr_service import generate_qr_png
from src.tickets.exceptions import ValidationError, CapacityError

router = APIRouter()

def _get_ticket_or_404(registry: TicketRegistry, ticket_id: str) -> Ticket:
    ticket = registry.get(ticket_id)
    if not ticket:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ticket not found"
        )
    return ticket

@router.post("/", response_model=Ticket, status_code=status.HTTP_201_CREATED)
def issue_ticket(
    request: TicketCreateRequest,
    db: Session = Depends(get_db)
):
    """Issue a numbered ticket for a slot that is neither full nor over"""

    registry = TicketRegistry(db)

    try:
        ticket = registry.create(request.name, request.contact, request.slot_id, reject_past=True)
    except CapacityError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except ValidationError as e:
        logger.warning(f"Ticket request rejected: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    # Try to schedule the entry reminder right away
    reminder_minutes = SettingsStore(db).get().reminder_minutes_before
    registry.reminders.schedule(ticket, reminder_minutes)

    return ticket

@router.get("/", response_model=List[Ticket])
def get_issued_tickets(db: Session = Depends(get_db)):
    """Get the tickets issued on this device, earliest entry first"""
    return TicketRegistry(db).list_by_slot_start()

@router.get("/{ticket_id}", response_model=Ticket)
def get_ticket(ticket_id: str, db: Session = Depends(get_db)):
    """Get ticket details by ID"""
    return _get_ticket_or_404(TicketRegistry(db), ticket_id)

@router.get("/{ticket_id}/ics")
def download_ticket_calendar(ticket_id: str, db: Session = Depends(get_db)):
    """Download the ticket's entry slot as an iCalendar file"""

    ticket = _get_ticket_or_404(TicketRegistry(db), ticket_id)
    ics = make_ics(ticket, SettingsStore(db).get())

    return Response(
        content=ics,
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename=ticket_{ticket.id}.ics"}
    )

@router.get("/{ticket_id}/qr")
def get_ticket_qr_code(ticket_id: str, db: Session = Depends(get_db)):
    """Get the ticket's QR code as a PNG image"""

    ticket = _get_ticket_or_404(TicketRegistry(db), ticket_id)

    return Response(content=generate_qr_png(ticket), media_type="image/png")

@router.post("/{ticket_id}/reminder", response_model=ReminderStatus)
def schedule_ticket_reminder(ticket_id: str, db: Session = Depends(get_db)):
    """Arm the entry reminder for a ticket (replaces any pending one)"""

    registry = TicketRegistry(db)
    ticket = _get_ticket_or_404(registry, ticket_id)
    minutes = SettingsStore(db).get().reminder_minutes_before

    scheduled = registry.reminders.schedule(ticket, minutes)

    return ReminderStatus(
        ticket_id=ticket.id,
        scheduled=scheduled,
        fire_at=registry.reminders.fire_time(ticket.slot_start, minutes) if scheduled else None,
        reminder_minutes_before=minutes,
        message=(
            f"You will be reminded {minutes} minutes before entry. Keep the service running."
            if scheduled else
            "Too late to schedule a reminder for this ticket."
        )
    )
