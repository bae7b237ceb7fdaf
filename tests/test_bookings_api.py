"""HTTP-level tests for the booking endpoints."""

from app.api.deps import get_notifier
from app.db.models.notification import Notification
from app.main import app
from app.services.notifications import NotificationSender
from tests.conftest import auth_header, insert_booking, next_weekday

VENUE = "Blue Bottle Cafe, 12 Market Street"


def booking_payload(companion, start="10:00", end="12:00", day=None):
    return {
        "companion_id": companion.id,
        "booking_date": (day or next_weekday(0)).isoformat(),
        "start_time": start,
        "end_time": end,
        "meeting_location": VENUE,
    }


class TestCreate:
    def test_requires_token(self, client, carol):
        res = client.post("/bookings", json=booking_payload(carol))
        assert res.status_code == 401
        assert res.json()["success"] is False

    def test_create_notifies_companion(self, client, db, alice, carol):
        res = client.post("/bookings", json=booking_payload(carol), headers=auth_header(alice))
        assert res.status_code == 201
        body = res.json()
        assert body["success"] is True
        assert body["data"]["status"] == "pending"
        assert float(body["data"]["total_amount"]) == 70.0

        notes = db.query(Notification).filter(Notification.user_id == carol.id).all()
        assert [n.type for n in notes] == ["booking_request"]

    def test_overlap_is_conflict(self, client, alice, bob, carol):
        day = next_weekday(0)
        assert client.post("/bookings", json=booking_payload(carol, day=day), headers=auth_header(alice)).status_code == 201

        res = client.post("/bookings", json=booking_payload(carol, "11:00", "12:00", day), headers=auth_header(bob))
        assert res.status_code == 409
        assert res.json()["message"] == "Time slot is already booked"

    def test_validation_error_shape(self, client, alice, carol):
        res = client.post("/bookings", json=booking_payload(carol, "10:00", "10:30"), headers=auth_header(alice))
        assert res.status_code == 400
        body = res.json()
        assert body["success"] is False
        assert "end_time" in body["errors"]

    def test_notification_failure_does_not_fail_booking(self, client, alice, carol, caplog):
        def explode():
            raise RuntimeError("no session available")

        app.dependency_overrides[get_notifier] = lambda: NotificationSender(explode)
        res = client.post("/bookings", json=booking_payload(carol), headers=auth_header(alice))
        assert res.status_code == 201
        assert "Failed to send 'booking_request'" in caplog.text


class TestLifecycle:
    def test_companion_approves(self, client, db, alice, bob, carol):
        day = next_weekday(4)
        first = insert_booking(db, alice, carol, day, "10:00", "12:00")
        rival = insert_booking(db, bob, carol, day, "11:00", "12:00")

        res = client.post(f"/bookings/{first.id}/approve", headers=auth_header(carol, "companion"))
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["booking"]["status"] == "confirmed"
        assert data["auto_cancelled_ids"] == [rival.id]

        types = {(n.user_id, n.type) for n in db.query(Notification).all()}
        assert (alice.id, "booking_confirmed") in types
        assert (bob.id, "booking_cancelled") in types

    def test_client_cannot_complete(self, client, db, alice, carol):
        booking = insert_booking(db, alice, carol, next_weekday(4), "10:00", "12:00", status="confirmed")
        res = client.patch(f"/bookings/{booking.id}/status", json={"status": "completed"}, headers=auth_header(alice))
        assert res.status_code == 403
        assert "confirmed to completed" in res.json()["message"]

    def test_client_cancels(self, client, db, alice, carol):
        booking = insert_booking(db, alice, carol, next_weekday(4), "10:00", "12:00", status="confirmed")
        res = client.patch(
            f"/bookings/{booking.id}/status",
            json={"status": "cancelled", "cancellation_reason": "Sick"},
            headers=auth_header(alice),
        )
        assert res.status_code == 200
        assert res.json()["data"]["cancellation_reason"] == "Sick"

    def test_reject_without_body(self, client, db, alice, carol):
        booking = insert_booking(db, alice, carol, next_weekday(4), "10:00", "12:00")
        res = client.post(f"/bookings/{booking.id}/reject", headers=auth_header(carol, "companion"))
        assert res.status_code == 200
        assert res.json()["data"]["status"] == "cancelled"

    def test_list_and_get(self, client, db, alice, bob, carol):
        booking = insert_booking(db, alice, carol, next_weekday(4), "10:00", "12:00")

        res = client.get("/bookings", headers=auth_header(carol, "companion"))
        assert [b["id"] for b in res.json()["data"]] == [booking.id]

        assert client.get(f"/bookings/{booking.id}", headers=auth_header(alice)).status_code == 200
        assert client.get(f"/bookings/{booking.id}", headers=auth_header(bob)).status_code == 404
