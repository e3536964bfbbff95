"""Errors raised by the ticket registry and its import/export helpers."""


class TicketingError(ValueError):
    """Base class; carries a message suitable for showing to the user"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(TicketingError):
    """Blank required field or a slot that cannot be selected"""


class CapacityError(TicketingError):
    """The selected slot has no remaining capacity"""


class ImportParseError(TicketingError):
    """A CSV import could not be processed at all"""
