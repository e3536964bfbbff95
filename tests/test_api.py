"""
API tests

Test Focus:
1. Visitor flow: settings, slots, issuing, ticket lookup, ICS/QR downloads
2. Error mapping: 400 invalid input, 404 unknown ticket, 409 full slot
3. Admin gate (X-Admin-Pin) and admin operations: settings, search,
   deletion, CSV export/import, per-slot counts
"""

from datetime import date, timedelta

import pytest

API = "/api/v1"


@pytest.fixture
def event_day(client, admin_headers, future_day) -> str:
    """Schedule tomorrow 09:00-10:00 in 10-minute slots with room for one"""
    response = client.patch(
        f"{API}/admin/settings",
        json={
            "slot_minutes": 10,
            "slot_capacity": 1,
            "schedule": {"date": future_day, "start": "09:00", "end": "10:00"},
        },
        headers=admin_headers,
    )
    assert response.status_code == 200
    return future_day


def issue(client, name: str, slot_id: str, contact: str = ""):
    return client.post(f"{API}/tickets/", json={"name": name, "contact": contact, "slot_id": slot_id})


class TestService:
    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestVisitorFlow:
    def test_public_settings_hide_pin(self, client):
        response = client.get(f"{API}/settings/")

        assert response.status_code == 200
        assert "admin_pin" not in response.json()
        assert response.json()["schedule"]["date"] == date.today().isoformat()

    def test_slots_reflect_schedule(self, client, event_day):
        slots = client.get(f"{API}/slots/").json()

        assert len(slots) == 6
        assert slots[0]["id"] == f"{event_day}-000"
        assert slots[0]["label"] == "09:00-09:10"
        assert slots[-1]["label"] == "09:50-10:00"
        assert all(s["is_available"] and s["remaining"] == 1 for s in slots)

    def test_issue_ticket(self, client, event_day, scheduler):
        response = issue(client, "Taro", f"{event_day}-002", contact="class 2-B")

        assert response.status_code == 201
        ticket = response.json()
        assert len(ticket["id"]) == 8
        assert ticket["slot_id"] == f"{event_day}-002"
        assert ticket["slot_start"].endswith("09:20:00")
        assert ticket["notified"] is False
        assert scheduler.pending() == [ticket["id"]]

    def test_issued_ticket_fills_slot(self, client, event_day):
        issue(client, "Taro", f"{event_day}-000")

        slot = client.get(f"{API}/slots/").json()[0]

        assert slot["booked"] == 1
        assert slot["is_full"] is True
        assert slot["is_available"] is False

    def test_full_slot_conflict(self, client, event_day):
        assert issue(client, "Taro", f"{event_day}-000").status_code == 201

        response = issue(client, "Hanako", f"{event_day}-000")

        assert response.status_code == 409
        assert response.json()["detail"] == "This slot is full. Please choose another time."

    @pytest.mark.parametrize(
        "name, slot_suffix, detail",
        [
            ("   ", "-000", "Please enter a name."),
            ("Taro", "-999", "The selected slot is not valid."),
        ],
    )
    def test_invalid_requests(self, client, event_day, name, slot_suffix, detail):
        response = issue(client, name, f"{event_day}{slot_suffix}")

        assert response.status_code == 400
        assert response.json()["detail"] == detail

    def test_past_slot_is_rejected(self, client, admin_headers):
        yesterday = (date.today() - timedelta(days=1)).isoformat()
        client.patch(
            f"{API}/admin/settings",
            json={"schedule": {"date": yesterday, "start": "09:00", "end": "10:00"}},
            headers=admin_headers,
        )

        response = issue(client, "Taro", f"{yesterday}-000")

        assert response.status_code == 400
        assert response.json()["detail"] == "The selected slot has already ended."

    def test_ticket_lookup(self, client, event_day):
        ticket = issue(client, "Taro", f"{event_day}-001").json()

        assert client.get(f"{API}/tickets/{ticket['id']}").json() == ticket
        assert client.get(f"{API}/tickets/ZZZZZ999").status_code == 404

    def test_tickets_listed_by_entry_time(self, client, event_day):
        late = issue(client, "Late", f"{event_day}-004").json()
        early = issue(client, "Early", f"{event_day}-001").json()

        listed = client.get(f"{API}/tickets/").json()

        assert [t["id"] for t in listed] == [early["id"], late["id"]]

    def test_calendar_download(self, client, event_day):
        ticket = issue(client, "Taro", f"{event_day}-000").json()

        response = client.get(f"{API}/tickets/{ticket['id']}/ics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/calendar")
        assert f"DESCRIPTION:Ticket number: {ticket['id']}" in response.text

    def test_qr_download(self, client, event_day):
        ticket = issue(client, "Taro", f"{event_day}-000").json()

        response = client.get(f"{API}/tickets/{ticket['id']}/qr")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")

    def test_reminder_endpoint(self, client, event_day, scheduler):
        ticket = issue(client, "Taro", f"{event_day}-000").json()
        scheduler.cancel_all()

        response = client.post(f"{API}/tickets/{ticket['id']}/reminder")

        body = response.json()
        assert response.status_code == 200
        assert body["scheduled"] is True
        assert body["fire_at"].endswith("08:55:00")
        assert scheduler.pending() == [ticket["id"]]


class TestAdminGate:
    def test_login(self, client):
        assert client.post(f"{API}/admin/login", json={"pin": "noguchi"}).json() == {"authenticated": True}
        assert client.post(f"{API}/admin/login", json={"pin": "wrong"}).json() == {"authenticated": False}

    @pytest.mark.parametrize("headers", [{}, {"X-Admin-Pin": "wrong"}])
    def test_admin_routes_require_pin(self, client, headers):
        assert client.get(f"{API}/admin/tickets", headers=headers).status_code == 401
        assert client.patch(f"{API}/admin/settings", json={"slot_capacity": 3}, headers=headers).status_code == 401

    def test_changed_pin_takes_effect(self, client, admin_headers):
        client.patch(f"{API}/admin/settings", json={"admin_pin": "1234"}, headers=admin_headers)

        assert client.get(f"{API}/admin/settings", headers=admin_headers).status_code == 401
        assert client.get(f"{API}/admin/settings", headers={"X-Admin-Pin": "1234"}).json()["admin_pin"] == "1234"


class TestAdminOperations:
    def test_settings_update_clamps_values(self, client, admin_headers):
        response = client.patch(
            f"{API}/admin/settings",
            json={"slot_minutes": 2, "slot_capacity": 0, "event_title": "Curse of Noguchi"},
            headers=admin_headers,
        )

        body = response.json()
        assert body["slot_minutes"] == 5
        assert body["slot_capacity"] == 1
        assert client.get(f"{API}/settings/").json()["event_title"] == "Curse of Noguchi"

    def test_malformed_schedule_is_rejected(self, client, admin_headers):
        response = client.patch(
            f"{API}/admin/settings",
            json={"schedule": {"start": "9 o'clock"}},
            headers=admin_headers,
        )

        assert response.status_code == 422

    def test_search_tickets(self, client, event_day, admin_headers):
        issue(client, "Taro Noguchi", f"{event_day}-000")
        issue(client, "Hanako", f"{event_day}-001", contact="class 3-A")

        assert len(client.get(f"{API}/admin/tickets", headers=admin_headers).json()) == 2
        found = client.get(f"{API}/admin/tickets", params={"q": "3-a"}, headers=admin_headers).json()
        assert [t["name"] for t in found] == ["Hanako"]

    def test_delete_ticket(self, client, event_day, admin_headers, scheduler):
        ticket = issue(client, "Taro", f"{event_day}-000").json()

        first = client.delete(f"{API}/admin/tickets/{ticket['id']}", headers=admin_headers)
        second = client.delete(f"{API}/admin/tickets/{ticket['id']}", headers=admin_headers)

        assert first.json() == {"ticket_id": ticket["id"], "removed": True}
        assert second.json() == {"ticket_id": ticket["id"], "removed": False}
        assert scheduler.pending() == []
        assert issue(client, "Hanako", f"{event_day}-000").status_code == 201

    def test_slot_counts(self, client, event_day, admin_headers):
        issue(client, "Taro", f"{event_day}-003")

        counts = client.get(f"{API}/admin/slots/counts", headers=admin_headers).json()

        assert len(counts) == 6
        assert {c["slot_id"]: c["booked"] for c in counts}[f"{event_day}-003"] == 1
        assert all(c["is_current"] and c["capacity"] == 1 for c in counts)

    def test_export_and_import(self, client, event_day, admin_headers):
        issue(client, "Taro, Jr.", f"{event_day}-000")
        issue(client, "Hanako", f"{event_day}-001")

        export = client.get(f"{API}/admin/tickets/export", headers=admin_headers)

        assert export.status_code == 200
        assert export.headers["content-type"].startswith("text/csv")
        assert "entry_tickets_" in export.headers["content-disposition"]
        assert export.text.splitlines()[0] == "id,name,contact,slot_label,slot_id,created_at"

        response = client.post(
            f"{API}/admin/tickets/import",
            files={"file": ("tickets.csv", export.content, "text/csv")},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["imported"] == 2
        assert response.json()["reassigned"] == 0
        names = [t["name"] for t in client.get(f"{API}/admin/tickets", headers=admin_headers).json()]
        assert names == ["Taro, Jr.", "Hanako"]

    def test_import_reassigns_unknown_slots(self, client, event_day, admin_headers):
        text = "id,name,slot_id\nQWERT123,Jiro,1999-01-01-000\n"

        response = client.post(
            f"{API}/admin/tickets/import",
            files={"file": ("tickets.csv", text.encode(), "text/csv")},
            headers=admin_headers,
        )

        assert response.json()["reassigned"] == 1
        assert client.get(f"{API}/tickets/QWERT123").json()["slot_id"] == f"{event_day}-000"

    @pytest.mark.parametrize(
        "filename, content",
        [
            ("tickets.txt", b"id,name\n"),
            ("tickets.csv", b""),
            ("tickets.csv", b"\xff\xfe\x00garbage"),
        ],
    )
    def test_rejected_imports(self, client, admin_headers, filename, content):
        response = client.post(
            f"{API}/admin/tickets/import",
            files={"file": (filename, content, "text/csv")},
            headers=admin_headers,
        )

        assert response.status_code == 400
