import pytest
from sqlalchemy import text

from conftest import auth_header, create_event, register, signup
from eventledger.database import engine


def test_create_event_normalizes_date(client, admin_token):
    event_id = create_event(client, admin_token, date="2026-11-05T20:00:00+02:00")

    event = client.get(f"/events/{event_id}").json()
    assert event["date"] == "2026-11-05T18:00:00"
    assert event["registration_count"] == 0
    assert event["is_full"] is False
    assert event["participants"] == []


@pytest.mark.parametrize("capacity", [0, -5])
def test_create_event_rejects_non_positive_capacity(client, admin_token, capacity):
    resp = client.post(
        "/events",
        json={"title": "Talk", "date": "2026-11-05", "capacity": capacity},
        headers=auth_header(admin_token)
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "validation_error"


def test_create_event_rejects_bad_date(client, admin_token):
    resp = client.post(
        "/events",
        json={"title": "Talk", "date": "next tuesday", "capacity": 5},
        headers=auth_header(admin_token)
    )
    assert resp.status_code == 400


def test_attendee_cannot_create_event(client):
    token = signup(client, "jane@example.com")["token"]
    resp = client.post(
        "/events",
        json={"title": "Talk", "date": "2026-11-05", "capacity": 5},
        headers=auth_header(token)
    )
    assert resp.status_code == 403


def test_anonymous_cannot_create_event(client):
    resp = client.post("/events", json={"title": "Talk", "date": "2026-11-05", "capacity": 5})
    assert resp.status_code == 401


def test_catalog_is_sorted_by_date_with_live_counts(client, admin_token):
    later = create_event(client, admin_token, title="Later", date="2026-12-01T09:00:00", capacity=1)
    earlier = create_event(client, admin_token, title="Earlier", date="2026-11-01T09:00:00")
    register(client, later, "guest@example.com")

    events = client.get("/events").json()

    assert [e["id"] for e in events] == [earlier, later]
    assert events[1]["registration_count"] == 1
    assert events[1]["is_full"] is True


def test_scope_mine_only_lists_owned_events(client, admin_token, other_admin_token):
    mine = create_event(client, admin_token, title="Mine")
    create_event(client, other_admin_token, title="Theirs")

    assert len(client.get("/events").json()) == 2

    owned = client.get("/events", params={"scope": "mine"}, headers=auth_header(admin_token)).json()
    assert [e["id"] for e in owned] == [mine]


def test_scope_mine_requires_admin(client):
    token = signup(client, "jane@example.com")["token"]
    assert client.get("/events", params={"scope": "mine"}).status_code == 401
    assert client.get("/events", params={"scope": "mine"}, headers=auth_header(token)).status_code == 403


def test_unknown_event_is_404(client):
    resp = client.get("/events/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["code"] == "not_found"


def test_delete_requires_confirmation(client, admin_token):
    event_id = create_event(client, admin_token)

    resp = client.delete(f"/events/{event_id}", headers=auth_header(admin_token))

    assert resp.status_code == 400
    assert client.get(f"/events/{event_id}").status_code == 200


def count_rows(table, event_id):
    with engine.connect() as conn:
        return conn.execute(
            text(f"SELECT COUNT(*) FROM {table} WHERE event_id = :event_id"),
            {"event_id": event_id}
        ).scalar()


def test_delete_cascades_registrations_and_attendance(client, admin_token):
    event_id = create_event(client, admin_token)
    kept_id = create_event(client, admin_token, title="Kept")
    registration_id = register(client, event_id, "guest@example.com").json()["id"]
    register(client, event_id, "second@example.com")
    register(client, event_id, "third@example.com")
    register(client, kept_id, "guest@example.com")
    client.post("/attendance", json={"event_id": event_id, "email": "guest@example.com"})

    resp = client.delete(
        f"/events/{event_id}",
        params={"confirm": "true"},
        headers=auth_header(admin_token)
    )
    assert resp.json() == {"success": True}

    assert client.get(f"/events/{event_id}").status_code == 404
    assert count_rows("registrations", event_id) == 0
    assert count_rows("attendance", event_id) == 0
    assert count_rows("registrations", kept_id) == 1
    toggle = client.post(
        "/admin/attendance",
        json={"registration_id": registration_id, "attended": True},
        headers=auth_header(admin_token)
    )
    assert toggle.json()["code"] == "not_registered"


def test_only_owner_can_delete(client, admin_token, other_admin_token):
    event_id = create_event(client, admin_token)

    resp = client.delete(
        f"/events/{event_id}",
        params={"confirm": "true"},
        headers=auth_header(other_admin_token)
    )

    assert resp.status_code == 403
    assert client.get(f"/events/{event_id}").status_code == 200


def test_delete_unknown_event_is_404(client, admin_token):
    resp = client.delete(
        "/events/does-not-exist",
        params={"confirm": "true"},
        headers=auth_header(admin_token)
    )
    assert resp.status_code == 404


def test_export_csv(client, admin_token):
    event_id = create_event(client, admin_token, title="Intro to Async Python")
    register(client, event_id, "ann@example.com", name="Ann", department="Sales")
    register(client, event_id, "bob@example.com", name="Bob")
    client.post("/attendance", json={"event_id": event_id, "email": "ann@example.com"})

    resp = client.get(f"/events/{event_id}/export.csv", headers=auth_header(admin_token))

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "intro-to-async-python-participants.csv" in resp.headers["content-disposition"]

    lines = resp.text.strip().splitlines()
    assert lines[0] == "name,email,department,status,registered_at,attended_at"
    rows = sorted(lines[1:])
    assert rows[0].startswith("Ann,ann@example.com,Sales,attended,")
    assert rows[1].startswith("Bob,bob@example.com,,registered,")
    assert rows[1].endswith(",")


def test_export_is_owner_only(client, admin_token, other_admin_token):
    event_id = create_event(client, admin_token)
    resp = client.get(f"/events/{event_id}/export.csv", headers=auth_header(other_admin_token))
    assert resp.status_code == 403


def test_reminders_count_only_unchecked_registrations(client, admin_token):
    event_id = create_event(client, admin_token)
    register(client, event_id, "ann@example.com")
    register(client, event_id, "bob@example.com")
    client.post("/attendance", json={"event_id": event_id, "email": "ann@example.com"})

    resp = client.post(f"/events/{event_id}/reminders", headers=auth_header(admin_token))

    assert resp.json() == {"status": "queued", "recipients": 1}
