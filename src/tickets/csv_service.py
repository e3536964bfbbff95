from typing import List, Optional, Tuple
from datetime import datetime
from sqlalchemy.orm import Session
from loguru import logger
import pandas as pd
import random
import csv
import io

from src.slots.schemas import Slot
from src.slots.service import SlotService, find_slot
from src.tickets.schemas import Ticket, TicketImportResult
from src.tickets.identifiers import generate_ticket_id
from src.tickets.registry import TicketRegistry
from src.tickets.exceptions import ImportParseError

CSV_COLUMNS = ["id", "name", "contact", "slot_label", "slot_id", "created_at"]

def export_tickets_csv(tickets: List[Ticket]) -> str:
    """Render tickets as CSV: plain header row, every value quoted"""

    data = [
        {
            "id": t.id,
            "name": t.name,
            "contact": t.contact,
            "slot_label": t.slot_label,
            "slot_id": t.slot_id,
            "created_at": t.created_at.isoformat()
        }
        for t in tickets
    ]
    df = pd.DataFrame(data, columns=CSV_COLUMNS)

    output = io.StringIO()
    output.write(",".join(CSV_COLUMNS) + "\n")
    df.to_csv(output, index=False, header=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    return output.getvalue()

def read_tickets_csv(text: str) -> pd.DataFrame:
    """Parse CSV text into string columns keyed by header name.

    Rows with more fields than the header are truncated, rows with fewer
    are padded with empty strings.
    """

    if not text or not text.strip():
        raise ImportParseError("The CSV file is empty.")

    header = _read_header(text)
    if not any(header):
        raise ImportParseError("The CSV file has no header row.")

    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            index_col=False,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=lambda fields: fields[:len(header)]
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ImportParseError(f"Could not parse the CSV file: {e}")

    df.columns = [str(c).strip() for c in df.columns]
    if not set(CSV_COLUMNS) & set(df.columns):
        raise ImportParseError(f"The CSV header must contain some of: {', '.join(CSV_COLUMNS)}")

    return df.fillna("")

def _read_header(text: str) -> List[str]:
    first_line = next(csv.reader(io.StringIO(text)), [])
    return [h.strip() for h in first_line]

def _field(row: dict, column: str) -> str:
    return str(row.get(column, "") or "").strip()

def _parse_created_at(value: str, fallback: datetime) -> datetime:
    if not value:
        return fallback
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return fallback
    if parsed.tzinfo is not None:
        # Stored times are naive local time
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed

def tickets_from_rows(
    df: pd.DataFrame,
    slots: List[Slot],
    existing_ids: set,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None
) -> Tuple[List[Ticket], TicketImportResult]:
    """Build tickets from parsed CSV rows against the current slot list.

    A row whose slot_id is not a current slot is assigned to the first
    slot. Rows without an id (or repeating one already imported) get a
    freshly generated id.
    """

    if not slots:
        raise ImportParseError("No slots are configured; cannot resolve imported rows.")

    now = now or datetime.now()
    taken = set(existing_ids)
    seen = set()
    tickets = []
    warnings = []
    reassigned = 0
    generated = 0

    for index, row in enumerate(df.to_dict(orient="records")):
        row_number = index + 2  # header is line 1

        slot_id = _field(row, "slot_id")
        slot = find_slot(slots, slot_id)
        if slot is None:
            slot = slots[0]
            reassigned += 1
            message = f"Row {row_number}: slot '{slot_id}' not found, assigned to {slot.id}"
            warnings.append(message)
            logger.warning(f"CSV import: {message}")

        ticket_id = _field(row, "id")
        if not ticket_id or ticket_id in seen:
            ticket_id = generate_ticket_id(taken | seen, rng=rng)
            generated += 1
        seen.add(ticket_id)

        tickets.append(Ticket(
            id=ticket_id,
            name=_field(row, "name"),
            contact=_field(row, "contact"),
            slot_id=slot.id,
            slot_start=slot.start_time,
            slot_end=slot.end_time,
            created_at=_parse_created_at(_field(row, "created_at"), now),
            notified=False
        ))

    return tickets, TicketImportResult(
        imported=len(tickets),
        reassigned=reassigned,
        generated_ids=generated,
        warnings=warnings
    )

class TicketCsvService:
    """CSV export of the registry and wholesale replacement from CSV"""

    def __init__(self, db: Session, registry: Optional[TicketRegistry] = None):
        self.db = db
        self.registry = registry or TicketRegistry(db)
        self.slot_service = SlotService(db)

    def export_csv(self) -> str:
        return export_tickets_csv(self.registry.list())

    def import_csv(self, text: str) -> TicketImportResult:
        """Replace the ticket list with the rows of ``text``; nothing changes on ImportParseError"""

        df = read_tickets_csv(text)
        tickets, result = tickets_from_rows(
            df,
            self.slot_service.get_slots(),
            self.registry.used_ids(),
            now=self.registry.clock(),
            rng=self.registry.rng
        )
        self.registry.replace_all(tickets)

        logger.info(
            f"CSV import: {result.imported} ticket(s), {result.reassigned} reassigned, "
            f"{result.generated_ids} new id(s)"
        )
        return result
