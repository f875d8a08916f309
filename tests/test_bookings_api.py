from decimal import Decimal

from eventbooking.loyalty.service import LoyaltyService
from tests.conftest import auth_headers, give_points, make_promotion


def book(client, user, event_id, tickets=10, total=10000, final=10000, discount=0, **extra):
    payload = {
        "event_id": event_id,
        "number_of_tickets": tickets,
        "total_amount": total,
        "discount_amount": discount,
        "final_amount": final,
        **extra,
    }
    return client.post("/api/v1/bookings", json=payload, headers=auth_headers(user))


def test_bookable_page(client, db, event, customer):
    give_points(db, customer, 40)

    response = client.get(f"/api/v1/bookings/events/{event.id}/bookable", headers=auth_headers(customer))

    assert response.status_code == 200
    body = response.json()
    assert body["available_tickets"] == 100
    assert body["loyalty_balance"] == 40
    assert Decimal(body["ticket_price"]) == Decimal("1000")


def test_bookable_page_unknown_event(client, customer):
    response = client.get("/api/v1/bookings/events/404/bookable", headers=auth_headers(customer))

    assert response.status_code == 404
    assert response.json() == {"detail": "Event not found", "code": "NOT_FOUND"}


def test_book_and_checkout(client, event, customer):
    created = book(client, customer, event.id)
    assert created.status_code == 201
    booking = created.json()
    assert booking["booking_status"] == "pending"
    assert booking["event_title"] == event.title
    assert Decimal(booking["final_amount"]) == Decimal("10000")

    checkout = client.post(f"/api/v1/bookings/{booking['id']}/checkout", headers=auth_headers(customer))
    assert checkout.status_code == 200
    result = checkout.json()
    assert result["booking"]["booking_status"] == "confirmed"
    assert result["booking"]["payment_status"] == "paid"
    assert result["booking"]["loyalty_earned"] == 1000
    numbers = [t["ticket_number"] for t in result["tickets"]]
    assert numbers[0] == f"TCKT-{booking['id']:05d}-001"
    assert numbers[-1] == f"TCKT-{booking['id']:05d}-010"

    again = client.post(f"/api/v1/bookings/{booking['id']}/checkout", headers=auth_headers(customer))
    assert [t["ticket_number"] for t in again.json()["tickets"]] == numbers

    loyalty = client.get("/api/v1/loyalty", headers=auth_headers(customer))
    assert loyalty.json()["points"] == 1000

    history = client.get("/api/v1/loyalty/history", headers=auth_headers(customer))
    assert [(h["change_type"], h["points"]) for h in history.json()] == [("earn", 1000)]

    verify = client.get(f"/Tickets/Verify/{numbers[3]}")
    assert verify.status_code == 200
    assert verify.json()["admissible"] is True


def test_list_and_get_bookings(client, event, customer, other_customer):
    first = book(client, customer, event.id, tickets=1, total=1000, final=1000).json()
    second = book(client, customer, event.id, tickets=2, total=2000, final=2000).json()

    listed = client.get("/api/v1/bookings", headers=auth_headers(customer)).json()
    assert [b["id"] for b in listed] == [second["id"], first["id"]]

    own = client.get(f"/api/v1/bookings/{first['id']}", headers=auth_headers(customer))
    assert own.status_code == 200

    foreign = client.get(f"/api/v1/bookings/{first['id']}", headers=auth_headers(other_customer))
    assert foreign.status_code == 403
    assert foreign.json()["code"] == "FORBIDDEN"


def test_capacity_exceeded(client, event, customer):
    response = book(client, customer, event.id, tickets=101, total=101000, final=101000)

    assert response.status_code == 409
    assert response.json() == {"detail": "Only 100 tickets available", "code": "CAPACITY_EXCEEDED"}


def test_amount_mismatch(client, event, customer):
    response = book(client, customer, event.id, final=9999)

    assert response.status_code == 400
    assert response.json()["detail"] == "Amount calculation mismatch. Please try again."


def test_insufficient_points(client, db, event, customer):
    give_points(db, customer, 50)

    response = book(client, customer, event.id, tickets=1, total=1000, discount=10, final=990, loyalty_used=100)

    assert response.status_code == 400
    assert response.json()["code"] == "INSUFFICIENT_POINTS"


def test_invalid_promotion(client, db, event, customer):
    make_promotion(db, "SAVE10")

    response = book(client, customer, event.id, promo_code="save10", discount=1000, final=9000)

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_PROMOTION"


def test_ticket_count_must_be_positive(client, event, customer):
    response = book(client, customer, event.id, tickets=0, total=0, final=0)
    assert response.status_code == 422


def test_checkout_failure_reports_event(client, event, customer, monkeypatch):
    booking = book(client, customer, event.id, tickets=1, total=1000, final=1000).json()

    def broken_credit(self, *args, **kwargs):
        raise RuntimeError("ledger unavailable")

    monkeypatch.setattr(LoyaltyService, "credit", broken_credit)

    response = client.post(f"/api/v1/bookings/{booking['id']}/checkout", headers=auth_headers(customer))

    assert response.status_code == 500
    assert response.json() == {
        "detail": "Failed to process checkout. Please try again.",
        "code": "TRANSACTION_FAILURE",
        "event_id": event.id,
    }

    still_pending = client.get(f"/api/v1/bookings/{booking['id']}", headers=auth_headers(customer)).json()
    assert still_pending["booking_status"] == "pending"
    assert still_pending["tickets"] == []


def test_organizer_cannot_book(client, event, organizer):
    response = book(client, organizer, event.id)

    assert response.status_code == 403
    assert response.json()["detail"] == "Not enough permissions"


def test_booking_requires_login(client, event):
    response = client.post("/api/v1/bookings", json={
        "event_id": event.id, "number_of_tickets": 1, "total_amount": 1000, "final_amount": 1000
    })
    assert response.status_code == 401


def test_verify_unknown_ticket(client):
    response = client.get("/Tickets/Verify/TCKT-00404-001")
    assert response.status_code == 404
