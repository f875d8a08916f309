from pydantic import BaseModel, Field, validator
from typing import List, Optional
from datetime import date, time, datetime
from decimal import Decimal
from enum import Enum

class EventStatus(str, Enum):
    """Event status enumeration"""
    UPCOMING = "upcoming"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

class Category(BaseModel):
    id: int
    name: str
    
    class Config:
        from_attributes = True

class Venue(BaseModel):
    id: int
    name: str
    location: str
    description: Optional[str] = None
    capacity: int = 0
    
    class Config:
        from_attributes = True

class EventCreate(BaseModel):
    """Request to create an event"""
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    event_date: date
    start_time: time
    end_time: time
    ticket_price: Decimal = Field(..., ge=0)
    total_capacity: int = Field(..., ge=0)
    category_id: int
    venue_id: int
    image_urls: List[str] = []
    
    @validator('end_time')
    def validate_end_time(cls, v, values):
        start = values.get('start_time')
        if start is not None and v <= start:
            raise ValueError('End time must be after start time')
        return v

class EventUpdate(BaseModel):
    """Partial update of an event; image_urls replaces the gallery when given"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    event_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    ticket_price: Optional[Decimal] = Field(None, ge=0)
    total_capacity: Optional[int] = Field(None, ge=0)
    category_id: Optional[int] = None
    venue_id: Optional[int] = None
    image_urls: Optional[List[str]] = None

class EventStatusUpdate(BaseModel):
    status: EventStatus

class EventSort(str, Enum):
    """Listing order"""
    DATE_ASC = "date_asc"
    DATE_DESC = "date_desc"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"

class EventSummary(BaseModel):
    """Event listing entry with live availability"""
    id: int
    title: str
    event_date: date
    start_time: time
    end_time: time
    ticket_price: Decimal
    total_capacity: int
    available_tickets: int
    status: EventStatus
    category: Optional[str] = None
    venue_name: Optional[str] = None
    location: Optional[str] = None

class EventDetail(EventSummary):
    description: str = ""
    organizer_id: int
    images: List[str] = []
    created_at: Optional[datetime] = None
