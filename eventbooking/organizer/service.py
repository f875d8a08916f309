from typing import List
from decimal import Decimal
from sqlalchemy import func, case
from sqlalchemy.orm import Session, joinedload

from eventbooking.models import Booking, Event
from eventbooking.auth.schemas import CurrentUser
from eventbooking.auth.permissions import is_admin
from eventbooking.bookings.schemas import BookingStatus, PaymentStatus, to_booking_schema
from eventbooking.organizer.schemas import OrganizerBooking, EventPerformance, OrganizerDashboard
from eventbooking.events.service import EventService

class OrganizerService:
    """Booking and revenue views for event organizers"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def list_bookings(self, organizer: CurrentUser) -> List[OrganizerBooking]:
        """Bookings on the organizer's events, newest first; admins see every booking"""
        
        query = (
            self.db.query(Booking)
            .join(Event, Booking.event_id == Event.id)
            .options(joinedload(Booking.event), joinedload(Booking.customer), joinedload(Booking.tickets))
        )
        if not is_admin(organizer):
            query = query.filter(Event.organizer_id == organizer.id)
        
        bookings = query.order_by(Booking.created_at.desc(), Booking.id.desc()).all()
        return [self._to_view(booking) for booking in bookings]
    
    def list_event_bookings(self, event_id: int, organizer: CurrentUser) -> List[OrganizerBooking]:
        event = EventService(self.db).get_owned_event(event_id, organizer)
        
        bookings = (
            self.db.query(Booking)
            .options(joinedload(Booking.event), joinedload(Booking.customer), joinedload(Booking.tickets))
            .filter(Booking.event_id == event.id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .all()
        )
        return [self._to_view(booking) for booking in bookings]
    
    def get_dashboard(self, organizer: CurrentUser) -> OrganizerDashboard:
        """Tickets sold, bookings and paid revenue per event"""
        
        tickets_sold = func.coalesce(func.sum(case(
            (Booking.booking_status == BookingStatus.CONFIRMED.value, Booking.number_of_tickets),
            else_=0
        )), 0)
        revenue = func.coalesce(func.sum(case(
            (Booking.payment_status == PaymentStatus.PAID.value, Booking.final_amount),
            else_=0
        )), 0)
        
        query = (
            self.db.query(Event, tickets_sold, func.count(Booking.id), revenue)
            .outerjoin(Booking, Booking.event_id == Event.id)
            .group_by(Event.id)
        )
        if not is_admin(organizer):
            query = query.filter(Event.organizer_id == organizer.id)
        
        performances = []
        for event, sold, count, earned in query.all():
            sold = int(sold or 0)
            earned = Decimal(str(earned or 0)).quantize(Decimal('0.01'))
            occupancy = round(sold / event.total_capacity * 100, 2) if event.total_capacity else 0.0
            performances.append(EventPerformance(
                event_id=event.id,
                title=event.title,
                total_capacity=event.total_capacity,
                tickets_sold=sold,
                bookings_count=count,
                revenue=earned,
                occupancy_percent=occupancy
            ))
        
        performances.sort(key=lambda p: p.revenue, reverse=True)
        
        return OrganizerDashboard(
            total_events=len(performances),
            total_bookings=sum(p.bookings_count for p in performances),
            total_tickets_sold=sum(p.tickets_sold for p in performances),
            total_revenue=sum((p.revenue for p in performances), Decimal('0.00')),
            events=performances
        )
    
    @staticmethod
    def _to_view(booking: Booking) -> OrganizerBooking:
        return OrganizerBooking(
            **to_booking_schema(booking).model_dump(),
            customer_name=booking.customer.name,
            customer_email=booking.customer.email
        )
