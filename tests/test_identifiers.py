"""
Unit tests for ticket identifier generation
"""

import random

from src.tickets.identifiers import generate_ticket_id, is_ticket_id


class ScriptedRandom:
    """Returns characters from a fixed script instead of random ones"""

    def __init__(self, script: str):
        self._chars = iter(script)

    def choice(self, seq):
        char = next(self._chars)
        assert char in seq
        return char


class TestGenerateTicketId:
    def test_shape(self):
        rng = random.Random(7)

        for _ in range(200):
            ticket_id = generate_ticket_id(rng=rng)
            assert is_ticket_id(ticket_id)
            assert ticket_id[:5].isalpha() and ticket_id[:5].isupper()
            assert ticket_id[5:].isdigit()

    def test_never_returns_a_used_id(self):
        rng = random.Random(11)
        used = set()

        for _ in range(500):
            ticket_id = generate_ticket_id(used, rng=rng)
            assert ticket_id not in used
            used.add(ticket_id)

    def test_retries_until_unused(self):
        rng = ScriptedRandom("AAAAA000" "AAAAA000" "BCDEF123")

        assert generate_ticket_id({"AAAAA000"}, rng=rng) == "BCDEF123"

    def test_accepts_any_iterable_of_used_ids(self):
        rng = ScriptedRandom("AAAAA000" "ZZZZZ999")

        assert generate_ticket_id(["AAAAA000"], rng=rng) == "ZZZZZ999"

    def test_default_random_source(self):
        assert is_ticket_id(generate_ticket_id())


class TestIsTicketId:
    def test_rejects_other_shapes(self):
        for value in ["ABCD1234", "abcde123", "ABCDE12", "ABCDE1234", "", None]:
            assert not is_ticket_id(value)
