from typing import Optional
from datetime import datetime, timezone

from src.event_settings.schemas import EventSettings
from src.tickets.schemas import Ticket

PRODID = "-//Timed Entry Ticketing//EN"
UID_DOMAIN = "entry-tickets.local"

def format_ics_datetime(value: datetime) -> str:
    """UTC timestamp in iCalendar basic format; naive values are local time"""
    return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")

def escape_ics_text(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )

def make_ics(ticket: Ticket, event_settings: EventSettings, now: Optional[datetime] = None) -> str:
    """Single-event calendar document for the ticket's entry slot"""
    
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "BEGIN:VEVENT",
        f"UID:{ticket.id}@{UID_DOMAIN}",
        f"DTSTAMP:{format_ics_datetime(now or datetime.now())}",
        f"DTSTART:{format_ics_datetime(ticket.slot_start)}",
        f"DTEND:{format_ics_datetime(ticket.slot_end)}",
        f"SUMMARY:{escape_ics_text(event_settings.event_title)}",
    ]
    
    if event_settings.location:
        lines.append(f"LOCATION:{escape_ics_text(event_settings.location)}")
    
    lines.append(f"DESCRIPTION:{escape_ics_text(f'Ticket number: {ticket.id}')}")
    lines += ["END:VEVENT", "END:VCALENDAR"]
    
    return "\r\n".join(lines) + "\r\n"
