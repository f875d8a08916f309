import base64
from decimal import Decimal

import pytest

from eventbooking.bookings.ticket_service import TicketService
from eventbooking.bookings.booking_service import BookingService
from eventbooking.bookings.schemas import BookingCreateRequest
from eventbooking.errors import NotFoundError
from tests.conftest import as_current_user

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def test_ticket_number_format():
    assert TicketService.ticket_number(1, 1) == "TCKT-00001-001"
    assert TicketService.ticket_number(42, 10) == "TCKT-00042-010"


def test_verification_url():
    assert TicketService.verification_url("TCKT-00001-001").endswith("/Tickets/Verify/TCKT-00001-001")


def test_qr_code_is_png_data_uri():
    uri = TicketService.render_qr_data_uri("http://localhost:8000/Tickets/Verify/TCKT-00001-001", box_size=4)
    prefix = "data:image/png;base64,"
    assert uri.startswith(prefix)
    assert base64.b64decode(uri[len(prefix):]).startswith(PNG_SIGNATURE)


def test_build_ticket_drafts():
    drafts = TicketService.build_ticket_drafts(7, 3)

    assert [d.sequence for d in drafts] == [1, 2, 3]
    assert [d.ticket_number for d in drafts] == ["TCKT-00007-001", "TCKT-00007-002", "TCKT-00007-003"]
    assert all(d.verification_url.endswith(d.ticket_number) for d in drafts)


@pytest.fixture
def checked_out_booking(db, event, customer):
    customer_user = as_current_user(customer, "customer")
    service = BookingService(db)
    booking = service.create_booking(BookingCreateRequest(
        event_id=event.id,
        number_of_tickets=2,
        total_amount=Decimal("2000"),
        final_amount=Decimal("2000")
    ), customer_user)
    service.finalize_checkout(booking.id, customer_user)
    return booking


def test_issue_tickets_skips_booking_with_tickets(db, checked_out_booking):
    service = TicketService(db)
    drafts = TicketService.build_ticket_drafts(checked_out_booking.id, 2)

    assert service.issue_tickets(checked_out_booking, drafts) == []
    assert len(service.get_booking_tickets(checked_out_booking.id)) == 2


def test_verify_ticket(db, checked_out_booking, event):
    result = TicketService(db).verify_ticket(f"TCKT-{checked_out_booking.id:05d}-002")

    assert result.admissible
    assert result.booking_id == checked_out_booking.id
    assert result.event_title == event.title


def test_cancelled_ticket_is_not_admissible(db, checked_out_booking, organizer):
    BookingService(db).update_booking_status(
        checked_out_booking.id, "cancelled", as_current_user(organizer, "organizer")
    )

    result = TicketService(db).verify_ticket(f"TCKT-{checked_out_booking.id:05d}-001")
    assert result.status == "cancelled"
    assert not result.admissible


def test_verify_unknown_ticket(db):
    with pytest.raises(NotFoundError):
        TicketService(db).verify_ticket("TCKT-99999-001")
