from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from eventbooking.database import get_db
from eventbooking.auth.dependencies import require_capability
from eventbooking.auth.schemas import Capability, CurrentUser
from eventbooking.bookings.schemas import Booking, BookingStatusUpdate, to_booking_schema
from eventbooking.bookings.booking_service import BookingService
from eventbooking.organizer.schemas import OrganizerBooking, OrganizerDashboard
from eventbooking.organizer.service import OrganizerService

router = APIRouter()

organizer_required = require_capability(Capability.MANAGE_BOOKINGS)

@router.get("/bookings", response_model=List[OrganizerBooking])
def list_organizer_bookings(
    current_user: CurrentUser = Depends(organizer_required),
    db: Session = Depends(get_db)
):
    """Bookings for the organizer's events"""
    return OrganizerService(db).list_bookings(current_user)

@router.get("/events/{event_id}/bookings", response_model=List[OrganizerBooking])
def list_event_bookings(
    event_id: int,
    current_user: CurrentUser = Depends(organizer_required),
    db: Session = Depends(get_db)
):
    """Bookings for one of the organizer's events"""
    return OrganizerService(db).list_event_bookings(event_id, current_user)

@router.put("/bookings/{booking_id}/status", response_model=Booking)
def update_booking_status(
    booking_id: int,
    update: BookingStatusUpdate,
    current_user: CurrentUser = Depends(organizer_required),
    db: Session = Depends(get_db)
):
    """Confirm or cancel a booking together with its tickets"""
    booking = BookingService(db).update_booking_status(booking_id, update.status, current_user)
    return to_booking_schema(booking)

@router.get("/dashboard", response_model=OrganizerDashboard)
def get_dashboard(
    current_user: CurrentUser = Depends(organizer_required),
    db: Session = Depends(get_db)
):
    """Sales and revenue per event"""
    return OrganizerService(db).get_dashboard(current_user)
