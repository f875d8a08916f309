from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from eventbooking.database import get_db
from eventbooking.auth.dependencies import require_capability
from eventbooking.auth.schemas import Capability, CurrentUser
from eventbooking.bookings.schemas import (
    BookingCreateRequest, Booking, BookablePage, CheckoutResult,
    TicketVerification, to_booking_schema
)
from eventbooking.bookings.booking_service import BookingService
from eventbooking.bookings.ticket_service import TicketService

router = APIRouter()
tickets_router = APIRouter()

customer_required = require_capability(Capability.BOOK_EVENTS)

@router.get("/events/{event_id}/bookable", response_model=BookablePage)
def get_bookable_page(
    event_id: int,
    current_user: CurrentUser = Depends(customer_required),
    db: Session = Depends(get_db)
):
    """Available tickets, ticket price and loyalty balance for the booking form"""
    return BookingService(db).get_bookable_page(event_id, current_user)

@router.post("", response_model=Booking, status_code=status.HTTP_201_CREATED)
def create_booking(
    request: BookingCreateRequest,
    current_user: CurrentUser = Depends(customer_required),
    db: Session = Depends(get_db)
):
    """Create a pending booking; checkout confirms it"""
    booking = BookingService(db).create_booking(request, current_user)
    return to_booking_schema(booking)

@router.get("", response_model=List[Booking])
def list_my_bookings(
    current_user: CurrentUser = Depends(customer_required),
    db: Session = Depends(get_db)
):
    """Bookings of the current customer, newest first"""
    bookings = BookingService(db).list_customer_bookings(current_user.id)
    return [to_booking_schema(booking) for booking in bookings]

@router.get("/{booking_id}", response_model=Booking)
def get_booking(
    booking_id: int,
    current_user: CurrentUser = Depends(customer_required),
    db: Session = Depends(get_db)
):
    """Get one of the current customer's bookings"""
    booking = BookingService(db).get_booking(booking_id, current_user)
    return to_booking_schema(booking)

@router.post("/{booking_id}/checkout", response_model=CheckoutResult)
def checkout(
    booking_id: int,
    current_user: CurrentUser = Depends(customer_required),
    db: Session = Depends(get_db)
):
    """Confirm payment, update loyalty points and issue tickets"""
    return BookingService(db).finalize_checkout(booking_id, current_user)

@tickets_router.get("/Tickets/Verify/{ticket_number}", response_model=TicketVerification)
def verify_ticket(ticket_number: str, db: Session = Depends(get_db)):
    """Target of the URL encoded in each ticket's QR code"""
    return TicketService(db).verify_ticket(ticket_number)
