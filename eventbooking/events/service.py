

from typing import List, Optional
from datetime import date
from decimal import Decimal
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from eventbooking.models import Event, EventCategory, Venue, EventImage, Booking, BookingStatus
from eventbooking.events.schemas import (
    EventCreate, EventUpdate, EventSummary, EventDetail, EventStatus, EventSort
)
from eventbooking.auth.schemas import CurrentUser
from eventbooking.auth.permissions import is_admin
from eventbooking.errors import NotFoundError, ValidationFailedError, ConflictError
from eventbooking.logger import logger

SORT_ORDERS = {
    EventSort.DATE_ASC: (Event.event_date.asc(), Event.start_time.asc()),
    EventSort.DATE_DESC: (Event.event_date.desc(), Event.start_time.desc()),
    EventSort.PRICE_ASC: (Event.ticket_price.asc(), Event.event_date.asc()),
    EventSort.PRICE_DESC: (Event.ticket_price.desc(), Event.event_date.asc()),
}

class EventService:
    """Service for the event catalog"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def get_event(self, event_id: int) -> Event:
        event = self.db.query(Event).filter(Event.id == event_id).first()
        if not event:
            raise NotFoundError("Event", event_id)
        return event
    
    def booked_tickets(self, event_id: int) -> int:
        """Tickets held by confirmed bookings"""
        total = self.db.query(func.coalesce(func.sum(Booking.number_of_tickets), 0)).filter(
            Booking.event_id == event_id,
            Booking.booking_status == BookingStatus.CONFIRMED.value
        ).scalar()
        return int(total or 0)
    
    def available_tickets(self, event: Event) -> int:
        return event.total_capacity - self.booked_tickets(event.id)
    
    def list_events(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        from_date: Optional[date] = None,
        location: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        sort: EventSort = EventSort.DATE_ASC
    ) -> List[EventSummary]:
        """Upcoming events dated today or later, filtered and sorted for the customer dashboard"""
        
        today = date.today()
        query = (
            self.db.query(Event)
            .join(Venue, Event.venue_id == Venue.id)
            .options(joinedload(Event.category), joinedload(Event.venue))
            .filter(
                Event.status == EventStatus.UPCOMING.value,
                Event.event_date >= max(from_date or today, today)
            )
        )
        
        if category and category != "all":
            query = query.join(EventCategory).filter(func.lower(EventCategory.name) == category.lower())
        
        if location and location != "all":
            query = query.filter(Venue.location.ilike(f"%{location}%"))
        
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                Event.title.ilike(pattern) | Event.description.ilike(pattern) | Venue.location.ilike(pattern)
            )
        
        if min_price is not None:
            query = query.filter(Event.ticket_price >= min_price)
        
        if max_price is not None:
            query = query.filter(Event.ticket_price <= max_price)
        
        events = query.order_by(*SORT_ORDERS[EventSort(sort)], Event.id.asc()).all()
        return [self._to_summary(event) for event in events]
    
    def get_event_detail(self, event_id: int) -> EventDetail:
        event = self.get_event(event_id)
        summary = self._to_summary(event)
        return EventDetail(
            **summary.model_dump(),
            description=event.description or "",
            organizer_id=event.organizer_id,
            images=[image.image_url for image in event.images],
            created_at=event.created_at
        )
    
    def create_event(self, data: EventCreate, organizer: CurrentUser) -> Event:
        self._check_references(data.category_id, data.venue_id)
        
        event = Event(
            title=data.title,
            description=data.description,
            event_date=data.event_date,
            start_time=data.start_time,
            end_time=data.end_time,
            ticket_price=data.ticket_price,
            total_capacity=data.total_capacity,
            status=EventStatus.UPCOMING.value,
            category_id=data.category_id,
            venue_id=data.venue_id,
            organizer_id=organizer.id
        )
        event.images = [EventImage(image_url=url) for url in data.image_urls]
        
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)
        
        logger.info(f"Organizer {organizer.id} created event {event.id} '{event.title}' with capacity {event.total_capacity}")
        return event
    
    def update_event(self, event_id: int, data: EventUpdate, organizer: CurrentUser) -> Event:
        """Apply the fields present in the request to one of the organizer's events"""
        
        event = self.get_owned_event(event_id, organizer)
        changes = data.model_dump(exclude_unset=True)
        image_urls = changes.pop("image_urls", None)
        
        for field, value in changes.items():
            if value is None:
                raise ValidationFailedError(f"{field} cannot be empty")
        
        self._check_references(changes.get("category_id"), changes.get("venue_id"))
        
        start_time = changes.get("start_time", event.start_time)
        end_time = changes.get("end_time", event.end_time)
        if end_time <= start_time:
            raise ValidationFailedError("End time must be after start time")
        
        if "total_capacity" in changes and changes["total_capacity"] < self.booked_tickets(event.id):
            raise ValidationFailedError("Capacity cannot be lower than tickets already sold")
        
        for field, value in changes.items():
            setattr(event, field, value)
        
        if image_urls is not None:
            event.images = [EventImage(image_url=url) for url in image_urls]
        
        self.db.commit()
        self.db.refresh(event)
        
        logger.info(f"User {organizer.id} updated event {event.id}")
        return event
    
    def set_status(self, event_id: int, status: EventStatus, organizer: CurrentUser) -> Event:
        """Move an event between upcoming, cancelled and completed"""
        
        event = self.get_owned_event(event_id, organizer)
        previous = event.status
        event.status = status.value
        self.db.commit()
        self.db.refresh(event)
        
        logger.info(f"User {organizer.id} moved event {event.id} from {previous} to {event.status}")
        return event
    
    def delete_event(self, event_id: int, organizer: CurrentUser) -> None:
        """Delete an event and its images; events with bookings must be cancelled instead"""
        
        event = self.get_owned_event(event_id, organizer)
        
        has_bookings = self.db.query(Booking.id).filter(Booking.event_id == event.id).first()
        if has_bookings:
            raise ConflictError("Event has bookings. Cancel it instead.")
        
        self.db.delete(event)
        self.db.commit()
        
        logger.info(f"User {organizer.id} deleted event {event_id}")
    
    def get_owned_event(self, event_id: int, organizer: CurrentUser) -> Event:
        """The event if the organizer owns it or is an admin"""
        query = self.db.query(Event).filter(Event.id == event_id)
        if not is_admin(organizer):
            query = query.filter(Event.organizer_id == organizer.id)
        event = query.first()
        if not event:
            raise NotFoundError("Event", event_id)
        return event
    
    def _check_references(self, category_id: Optional[int], venue_id: Optional[int]) -> None:
        if category_id is not None and not self.db.query(EventCategory).filter(EventCategory.id == category_id).first():
            raise ValidationFailedError("Category does not exist")
        
        if venue_id is not None and not self.db.query(Venue).filter(Venue.id == venue_id).first():
            raise ValidationFailedError("Venue does not exist")
    
    def list_categories(self) -> List[EventCategory]:
        return self.db.query(EventCategory).order_by(EventCategory.name).all()
    
    def list_venues(self) -> List[Venue]:
        return self.db.query(Venue).order_by(Venue.name).all()
    
    def _to_summary(self, event: Event) -> EventSummary:
        return EventSummary(
            id=event.id,
            title=event.title,
            event_date=event.event_date,
            start_time=event.start_time,
            end_time=event.end_time,
            ticket_price=event.ticket_price,
            total_capacity=event.total_capacity,
            available_tickets=self.available_tickets(event),
            status=event.status,
            category=event.category.name if event.category else None,
            venue_name=event.venue.name if event.venue else None,
            location=event.venue.location if event.venue else None
        )
