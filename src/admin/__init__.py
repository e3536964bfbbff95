"""
Admin Module

Reception/admin panel for the event: settings changes, the ticket list
with search and deletion, per-slot booking counts, and CSV export/import.

Access is gated by a shared PIN sent in the X-Admin-Pin header. The gate
is a convenience for a single local device, not a security boundary.
"""

from . import router, schemas, dependencies

__all__ = [
    "router",
    "schemas",
    "dependencies"
]
