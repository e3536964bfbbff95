from typing import Callable, Dict, List, Optional
from datetime import datetime
from sqlalchemy.orm import Session
from loguru import logger
import threading
import random
import pydantic

from src.storage import KeyValueStore, TICKETS_KEY
from src.event_settings.service import SettingsStore
from src.slots.schemas import Slot
from src.slots.service import build_slots_for_settings, find_slot, is_slot_past
from src.tickets.schemas import Ticket
from src.tickets.identifiers import generate_ticket_id
from src.tickets.exceptions import ValidationError, CapacityError
from src.tickets.reminder_service import ReminderScheduler, reminder_scheduler

# Serialises read-check-write sequences so two requests cannot both pass
# the capacity check against the same stale count.
_registry_lock = threading.RLock()

def count_tickets_for_slot(tickets: List[Ticket], slot_id: str) -> int:
    """Number of tickets referencing ``slot_id``"""
    return sum(1 for t in tickets if t.slot_id == slot_id)

def counts_by_slot(tickets: List[Ticket], slots: List[Slot]) -> Dict[str, int]:
    """Ticket count per slot id, zero-filled for every current slot.

    Tickets referencing slots that are no longer produced by the current
    settings keep their own entries.
    """
    counts = {s.id: 0 for s in slots}
    for ticket in tickets:
        counts[ticket.slot_id] = counts.get(ticket.slot_id, 0) + 1
    return counts

def matches_filter(ticket: Ticket, keyword: str) -> bool:
    """Case-insensitive substring match over id, name, contact, slot id and start time"""
    fields = [
        ticket.id,
        ticket.name,
        ticket.contact,
        ticket.slot_id,
        ticket.slot_start.strftime("%H:%M")
    ]
    return any(keyword in (value or "").lower() for value in fields)

class TicketRegistry:
    """Owner of the persisted, insertion-ordered ticket list"""

    def __init__(
        self,
        db: Session,
        reminders: Optional[ReminderScheduler] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.db = db
        self.store = KeyValueStore(db)
        self.settings_store = SettingsStore(db)
        self.reminders = reminders or reminder_scheduler
        self.rng = rng
        self.clock = clock

    # -------- Persistence --------

    def _load(self) -> List[Ticket]:
        raw = self.store.load_json(TICKETS_KEY, [])
        if not isinstance(raw, list):
            logger.warning("Stored ticket list is not a list; treating it as empty")
            return []

        tickets = []
        for item in raw:
            try:
                tickets.append(Ticket(**item))
            except (pydantic.ValidationError, TypeError) as e:
                logger.warning(f"Skipping unreadable stored ticket: {e}")
        return tickets

    def _save(self, tickets: List[Ticket]) -> None:
        self.store.save_json(TICKETS_KEY, [t.model_dump(mode="json") for t in tickets])

    # -------- Queries --------

    def list(self, filter: Optional[str] = None) -> List[Ticket]:
        """All tickets in insertion order, optionally narrowed by a search keyword"""
        tickets = self._load()
        keyword = (filter or "").strip().lower()
        if not keyword:
            return tickets
        return [t for t in tickets if matches_filter(t, keyword)]

    def list_by_slot_start(self) -> List[Ticket]:
        return sorted(self._load(), key=lambda t: t.slot_start)

    def get(self, ticket_id: str) -> Optional[Ticket]:
        return next((t for t in self._load() if t.id == ticket_id), None)

    def used_ids(self) -> set:
        return {t.id for t in self._load()}

    def count_for_slot(self, slot_id: str) -> int:
        return count_tickets_for_slot(self._load(), slot_id)

    def counts_by_slot(self, slots: List[Slot]) -> Dict[str, int]:
        return counts_by_slot(self._load(), slots)

    # -------- Mutations --------

    def create(
        self,
        name: str,
        contact: Optional[str],
        slot_id: str,
        reject_past: bool = False
    ) -> Ticket:
        """Issue a ticket for ``slot_id``.

        Raises ValidationError for a blank name or an unknown slot (and for
        an already finished slot when ``reject_past`` is set), CapacityError
        when the slot is full. The registry is unchanged on failure.
        """

        name = (name or "").strip()
        if not name:
            raise ValidationError("Please enter a name.")

        event_settings = self.settings_store.get()
        slot = find_slot(build_slots_for_settings(event_settings), slot_id)
        if slot is None:
            raise ValidationError("The selected slot is not valid.")

        now = self.clock()
        if reject_past and is_slot_past(slot, now):
            raise ValidationError("The selected slot has already ended.")

        with _registry_lock:
            tickets = self._load()

            booked = count_tickets_for_slot(tickets, slot.id)
            if booked >= event_settings.slot_capacity:
                logger.warning(f"Slot {slot.id} is full ({booked}/{event_settings.slot_capacity})")
                raise CapacityError("This slot is full. Please choose another time.")

            ticket = Ticket(
                id=generate_ticket_id({t.id for t in tickets}, rng=self.rng),
                name=name,
                contact=(contact or "").strip(),
                slot_id=slot.id,
                slot_start=slot.start_time,
                slot_end=slot.end_time,
                created_at=now,
                notified=False
            )

            self._save(tickets + [ticket])

        logger.info(f"Issued ticket {ticket.id} for slot {slot.id} ({slot.label}), {booked + 1}/{event_settings.slot_capacity}")
        return ticket

    def remove(self, ticket_id: str) -> bool:
        """Delete a ticket; returns False (and changes nothing) if it does not exist"""

        with _registry_lock:
            tickets = self._load()
            remaining = [t for t in tickets if t.id != ticket_id]
            removed = len(remaining) != len(tickets)
            if removed:
                self._save(remaining)

        self.reminders.cancel(ticket_id)

        if removed:
            logger.info(f"Removed ticket {ticket_id}")
        return removed

    def replace_all(self, tickets: List[Ticket]) -> None:
        """Swap the whole list (bulk import); reminders of the old list are cancelled"""

        with _registry_lock:
            previous_ids = {t.id for t in self._load()}
            self._save(list(tickets))

        for ticket_id in previous_ids:
            self.reminders.cancel(ticket_id)

        logger.info(f"Replaced ticket list: {len(previous_ids)} -> {len(tickets)} tickets")

    def mark_notified(self, ticket_id: str) -> Optional[Ticket]:
        """Flip the ticket's notified flag; returns None if the ticket is gone"""

        with _registry_lock:
            tickets = self._load()
            target = next((t for t in tickets if t.id == ticket_id), None)
            if target is None:
                return None
            if not target.notified:
                target.notified = True
                self._save(tickets)

        return target
