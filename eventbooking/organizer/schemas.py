from pydantic import BaseModel
from typing import List
from decimal import Decimal

from eventbooking.bookings.schemas import Booking

class OrganizerBooking(Booking):
    """Booking as seen by the organizer, with the customer's contact"""
    customer_name: str
    customer_email: str

class EventPerformance(BaseModel):
    event_id: int
    title: str
    total_capacity: int
    tickets_sold: int
    bookings_count: int
    revenue: Decimal
    occupancy_percent: float

class OrganizerDashboard(BaseModel):
    total_events: int
    total_bookings: int
    total_tickets_sold: int
    total_revenue: Decimal
    events: List[EventPerformance]
