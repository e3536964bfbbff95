from fastapi import APIRouter, Depends, HTTPException, status, Query, UploadFile, File
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime
from loguru import logger
import io

from .schemas import AdminLogin, AdminLoginResponse, SlotBookingCount, TicketRemovalResult
from .dependencies import require_admin, pin_matches
from ..database import get_db
from ..event_settings.schemas import EventSettings, EventSettingsUpdate
from ..event_settings.service import SettingsStore
from ..slots.service import build_slots_for_settings
from ..tickets.schemas import Ticket, TicketImportResult
from ..tickets.registry import TicketRegistry
from ..tickets.csv_service import TicketCsvService
from ..tickets.exceptions import ImportParseError

router = APIRouter()

@router.post("/login", response_model=AdminLoginResponse)
def admin_login(login: AdminLogin, db: Session = Depends(get_db)):
    """Check the admin PIN (the client then sends it as X-Admin-Pin)"""
    authenticated = pin_matches(login.pin, SettingsStore(db).get().admin_pin)
    if not authenticated:
        logger.warning("Admin login failed")
    return AdminLoginResponse(authenticated=authenticated)

# Settings
@router.get("/settings", response_model=EventSettings)
def get_admin_settings(
    _admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Get the full settings record, PIN included"""
    return SettingsStore(db).get()

@router.patch("/settings", response_model=EventSettings)
def update_settings(
    changes: EventSettingsUpdate,
    _admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Merge a partial settings change; slots are rebuilt from the result"""
    return SettingsStore(db).update(changes)

# Tickets
@router.get("/tickets", response_model=List[Ticket])
def list_tickets(
    q: Optional[str] = Query(None, description="Search by number, name, contact, time or slot ID"),
    _admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List issued tickets in registration order"""
    return TicketRegistry(db).list(q)

@router.delete("/tickets/{ticket_id}", response_model=TicketRemovalResult)
def delete_ticket(
    ticket_id: str,
    _admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a ticket; deleting an unknown ticket is a no-op"""
    removed = TicketRegistry(db).remove(ticket_id)
    return TicketRemovalResult(ticket_id=ticket_id, removed=removed)

@router.get("/tickets/export")
def export_tickets(
    _admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Export all tickets to CSV"""
    csv_text = TicketCsvService(db).export_csv()
    filename = f"entry_tickets_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"

    return StreamingResponse(
        io.BytesIO(csv_text.encode("utf-8")),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )

@router.post("/tickets/import", response_model=TicketImportResult)
def import_tickets(
    file: UploadFile = File(...),
    _admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Replace every ticket with the rows of an exported CSV file"""
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Only CSV files are supported")

    try:
        content = file.file.read().decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="The CSV file must be UTF-8 encoded")

    try:
        return TicketCsvService(db).import_csv(content)
    except ImportParseError as e:
        raise HTTPException(status_code=400, detail=str(e))

# Slots
@router.get("/slots/counts", response_model=List[SlotBookingCount])
def get_slot_counts(
    _admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Bookings per slot; slots no longer in the schedule are listed last"""
    event_settings = SettingsStore(db).get()
    slots = build_slots_for_settings(event_settings)
    counts = TicketRegistry(db).counts_by_slot(slots)
    labels = {s.id: s.label for s in slots}

    results = [
        SlotBookingCount(
            slot_id=slot_id,
            label=labels.get(slot_id),
            booked=booked,
            capacity=event_settings.slot_capacity,
            is_current=slot_id in labels
        )
        for slot_id, booked in counts.items()
    ]
    return sorted(results, key=lambda r: not r.is_current)
