from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from decimal import Decimal

from eventbooking.database import get_db
from eventbooking.auth.dependencies import require_capability
from eventbooking.auth.schemas import Capability, CurrentUser
from eventbooking.events.schemas import (
    EventCreate, EventUpdate, EventStatusUpdate, EventSort, EventSummary, EventDetail, Category, Venue
)
from eventbooking.events.service import EventService

router = APIRouter()

organizer_required = require_capability(Capability.MANAGE_EVENTS)

@router.get("", response_model=List[EventSummary])
def list_events(
    category: Optional[str] = Query(None, description="Category name"),
    search: Optional[str] = Query(None, description="Search title, description and venue location"),
    location: Optional[str] = Query(None, description="Venue location contains"),
    min_price: Optional[Decimal] = Query(None, ge=0, description="Lowest ticket price"),
    max_price: Optional[Decimal] = Query(None, ge=0, description="Highest ticket price"),
    from_date: Optional[date] = Query(None, description="Only events on or after this date"),
    sort: EventSort = Query(EventSort.DATE_ASC, description="date_asc, date_desc, price_asc or price_desc"),
    db: Session = Depends(get_db)
):
    """List upcoming events from today on, with available tickets"""
    return EventService(db).list_events(
        category=category,
        search=search,
        from_date=from_date,
        location=location,
        min_price=min_price,
        max_price=max_price,
        sort=sort
    )

@router.get("/categories", response_model=List[Category])
def list_categories(db: Session = Depends(get_db)):
    return EventService(db).list_categories()

@router.get("/venues", response_model=List[Venue])
def list_venues(db: Session = Depends(get_db)):
    return EventService(db).list_venues()

@router.get("/{event_id}", response_model=EventDetail)
def get_event(event_id: int, db: Session = Depends(get_db)):
    """Get event details"""
    return EventService(db).get_event_detail(event_id)

@router.post("", response_model=EventDetail, status_code=status.HTTP_201_CREATED)
def create_event(
    request: EventCreate,
    current_user: CurrentUser = Depends(organizer_required),
    db: Session = Depends(get_db)
):
    """Create an event owned by the calling organizer"""
    service = EventService(db)
    event = service.create_event(request, current_user)
    return service.get_event_detail(event.id)

@router.put("/{event_id}", response_model=EventDetail)
def update_event(
    event_id: int,
    request: EventUpdate,
    current_user: CurrentUser = Depends(organizer_required),
    db: Session = Depends(get_db)
):
    """Edit one of the organizer's events"""
    service = EventService(db)
    event = service.update_event(event_id, request, current_user)
    return service.get_event_detail(event.id)

@router.put("/{event_id}/status", response_model=EventDetail)
def update_event_status(
    event_id: int,
    request: EventStatusUpdate,
    current_user: CurrentUser = Depends(organizer_required),
    db: Session = Depends(get_db)
):
    """Mark an event upcoming, cancelled or completed"""
    service = EventService(db)
    event = service.set_status(event_id, request.status, current_user)
    return service.get_event_detail(event.id)

@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int,
    current_user: CurrentUser = Depends(organizer_required),
    db: Session = Depends(get_db)
):
    """Delete an event without bookings, together with its images"""
    EventService(db).delete_event(event_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
