"""
Booking & Ticketing Module

Customers book tickets for events and check out; checkout runs as one
database transaction covering the loyalty ledger, the payment record, the
booking status and ticket issue.

Key Components:
- booking_service.py: availability, pricing checks and checkout
- ticket_service.py: ticket numbers, QR code data URIs and verification
- router.py: customer booking endpoints and the ticket verification URL
- schemas.py: Pydantic models for bookings and tickets
"""

from .router import router, tickets_router
from .booking_service import BookingService
from .ticket_service import TicketService
from .schemas import (
    BookingCreateRequest, Booking, BookablePage, CheckoutResult, BookingStatus,
    PaymentStatus, Ticket, TicketStatus, TicketVerification
)

__all__ = [
    "router",
    "tickets_router",
    "BookingService",
    "TicketService",
    "BookingCreateRequest",
    "Booking",
    "BookablePage",
    "CheckoutResult",
    "BookingStatus",
    "PaymentStatus",
    "Ticket",
    "TicketStatus",
    "TicketVerification"
]
