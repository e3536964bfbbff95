"""
Entry reminders.

A reminder is a one-shot timer keyed by ticket id that fires
``reminder_minutes_before`` minutes ahead of the ticket's slot start. Timers
live only as long as the process; they are cancelled when their ticket is
removed and re-armed on startup for tickets that were never notified.
"""

from typing import Callable, Dict, List, Optional
from datetime import datetime, timedelta
from loguru import logger
import threading

class ReminderScheduler:
    """Cancellable per-ticket reminder timers"""

    def __init__(self, deliver: Optional[Callable[[str], None]] = None):
        self._lock = threading.Lock()
        self._timers: Dict[str, threading.Timer] = {}
        self._deliver = deliver or deliver_reminder

    @staticmethod
    def fire_time(slot_start: datetime, reminder_minutes_before: int) -> datetime:
        return slot_start - timedelta(minutes=reminder_minutes_before)

    def schedule(self, ticket, reminder_minutes_before: int, now: Optional[datetime] = None) -> bool:
        """Arm (or re-arm) the reminder for ``ticket``.

        Returns False without scheduling anything when the fire time is not
        in the future.
        """

        now = now or datetime.now()
        delay = (self.fire_time(ticket.slot_start, reminder_minutes_before) - now).total_seconds()

        if delay <= 0:
            logger.debug(f"Reminder for ticket {ticket.id} not scheduled: fire time already passed")
            return False

        timer = threading.Timer(delay, self._fire)
        timer.args = (ticket.id, timer)
        timer.daemon = True

        with self._lock:
            previous = self._timers.pop(ticket.id, None)
            if previous is not None:
                previous.cancel()
            self._timers[ticket.id] = timer

        timer.start()
        logger.info(f"Reminder for ticket {ticket.id} scheduled in {int(delay)}s")
        return True

    def cancel(self, ticket_id: str) -> bool:
        with self._lock:
            timer = self._timers.pop(ticket_id, None)

        if timer is None:
            return False

        timer.cancel()
        logger.info(f"Reminder for ticket {ticket_id} cancelled")
        return True

    def cancel_all(self) -> int:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()

        for timer in timers:
            timer.cancel()
        return len(timers)

    def pending(self) -> List[str]:
        with self._lock:
            return sorted(self._timers)

    def _fire(self, ticket_id: str, timer: threading.Timer) -> None:
        with self._lock:
            if self._timers.get(ticket_id) is not timer:
                # Replaced or cancelled after this timer had already started
                logger.debug(f"Stale reminder for ticket {ticket_id} ignored")
                return
            del self._timers[ticket_id]

        try:
            self._deliver(ticket_id)
        except Exception as e:
            logger.exception(f"Reminder delivery for ticket {ticket_id} failed: {e}")

def deliver_reminder(ticket_id: str) -> None:
    """Announce the entry time of a ticket and mark it as notified"""
    # Import here to avoid circular imports
    from src.database import SessionLocal
    from src.tickets.registry import TicketRegistry

    db = SessionLocal()
    try:
        registry = TicketRegistry(db)
        ticket = registry.mark_notified(ticket_id)
        if ticket is None:
            logger.info(f"Reminder skipped: ticket {ticket_id} no longer exists")
            return

        logger.info(
            f"Entry reminder: ticket {ticket.id} for {ticket.name}, "
            f"entry at {ticket.slot_start.strftime('%H:%M')}"
        )
    finally:
        db.close()

def rearm_pending_reminders(db, scheduler: Optional[ReminderScheduler] = None, now: Optional[datetime] = None) -> int:
    """Schedule reminders for every ticket that has not been notified yet"""
    from src.event_settings.service import SettingsStore
    from src.tickets.registry import TicketRegistry

    scheduler = scheduler or reminder_scheduler
    minutes = SettingsStore(db).get().reminder_minutes_before

    armed = 0
    for ticket in TicketRegistry(db, reminders=scheduler).list():
        if not ticket.notified and scheduler.schedule(ticket, minutes, now=now):
            armed += 1

    if armed:
        logger.info(f"Re-armed {armed} reminder(s)")
    return armed

reminder_scheduler = ReminderScheduler()
