from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from eventbooking.models import BookingStatus, PaymentStatus, TicketStatus

# Booking Request Models
class BookingCreateRequest(BaseModel):
    """Request to book tickets; amounts are the ones shown to the customer"""
    event_id: int
    number_of_tickets: int = Field(..., gt=0, description="Tickets to book")
    promo_code: Optional[str] = None
    loyalty_used: int = Field(0, ge=0, description="Loyalty points to redeem")
    total_amount: Decimal
    discount_amount: Decimal = Decimal('0')
    final_amount: Decimal

class BookingStatusUpdate(BaseModel):
    """Organizer request to confirm or cancel a booking"""
    status: str

# Pricing
class BookingAmounts(BaseModel):
    """Server-side price breakdown for a booking"""
    total_amount: Decimal
    promotion_discount: Decimal = Decimal('0')
    loyalty_discount: Decimal = Decimal('0')
    discount_amount: Decimal
    final_amount: Decimal

class BookablePage(BaseModel):
    """What a customer needs to fill in the booking form"""
    event_id: int
    title: str
    available_tickets: int
    ticket_price: Decimal
    loyalty_balance: int

# Ticket Models
class TicketDraft(BaseModel):
    """Ticket number and rendered QR code, prepared before persistence"""
    sequence: int
    ticket_number: str
    verification_url: str
    qr_code: str

class Ticket(BaseModel):
    id: int
    ticket_number: str
    qr_code: str
    status: TicketStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True

class TicketVerification(BaseModel):
    """Result of scanning a ticket"""
    ticket_number: str
    status: TicketStatus
    booking_id: int
    booking_status: BookingStatus
    event_id: int
    event_title: str
    admissible: bool

# Booking Response Models
class Booking(BaseModel):
    id: int
    customer_id: int
    event_id: int
    event_title: Optional[str] = None
    number_of_tickets: int
    ticket_price: Decimal
    total_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal
    promotion_code: Optional[str] = None
    loyalty_used: int
    loyalty_earned: int
    payment_status: PaymentStatus
    booking_status: BookingStatus
    created_at: datetime
    tickets: List[Ticket] = []
    
    class Config:
        from_attributes = True

class CheckoutResult(BaseModel):
    """Finalized booking with its tickets"""
    booking: Booking
    tickets: List[Ticket]

def to_booking_schema(booking) -> Booking:
    """Build the response model from an ORM booking"""
    view = Booking.model_validate(booking)
    if booking.event is not None:
        view.event_title = booking.event.title
    return view
