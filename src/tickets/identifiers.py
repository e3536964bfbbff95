"""
Ticket identifier generation.

Identifiers are five uppercase letters followed by three digits
(e.g. ``QKZRA042``). Every character is drawn independently and uniformly,
so the digit suffix is uniform over 000-999 as well.
"""

import random
import re
import secrets
import string
from typing import Iterable, Optional

TICKET_ID_LETTERS = string.ascii_uppercase
TICKET_ID_DIGITS = string.digits
LETTER_COUNT = 5
DIGIT_COUNT = 3

TICKET_ID_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{3}$")

_system_random = secrets.SystemRandom()


def generate_ticket_id(used_ids: Iterable[str] = (), rng: Optional[random.Random] = None) -> str:
    """Return a new identifier that is not in ``used_ids``.

    Candidates are drawn until one is free; the 26^5 * 10^3 space makes
    retries rare but the loop never gives up on a collision.
    """
    rng = rng or _system_random
    used = used_ids if isinstance(used_ids, (set, frozenset)) else set(used_ids)

    while True:
        candidate = (
            "".join(rng.choice(TICKET_ID_LETTERS) for _ in range(LETTER_COUNT))
            + "".join(rng.choice(TICKET_ID_DIGITS) for _ in range(DIGIT_COUNT))
        )
        if candidate not in used:
            return candidate


def is_ticket_id(value: str) -> bool:
    return bool(TICKET_ID_PATTERN.match(value or ""))
