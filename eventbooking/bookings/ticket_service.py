from typing import List, Optional
from datetime import datetime
from sqlalchemy.orm import Session, joinedload
import base64
import qrcode
from qrcode import constants
from qrcode.image.pil import PilImage
from io import BytesIO

from eventbooking.config import settings
from eventbooking.models import Booking, Ticket
from eventbooking.bookings.schemas import (
    TicketDraft, TicketStatus, TicketVerification, BookingStatus
)
from eventbooking.errors import NotFoundError
from eventbooking.logger import logger

class TicketService:
    """Service for issuing tickets with QR codes and looking them up"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def ticket_number(booking_id: int, sequence: int) -> str:
        """Positional ticket number, unique through the booking id"""
        return f"TCKT-{booking_id:05d}-{sequence:03d}"

    @staticmethod
    def verification_url(ticket_number: str) -> str:
        base_url = settings.TICKET_VERIFY_BASE_URL.rstrip("/")
        return f"{base_url}/Tickets/Verify/{ticket_number}"

    @staticmethod
    def render_qr_data_uri(content: str, box_size: Optional[int] = None) -> str:
        """Render content as a PNG QR code embedded in a data URI"""

        qr = qrcode.QRCode(
            version=None,
            error_correction=constants.ERROR_CORRECT_Q,
            box_size=box_size or settings.QR_BOX_SIZE,
            border=4,
            image_factory=PilImage,
        )
        qr.add_data(content)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        img.save(buffer, format='PNG')

        return f"data:image/png;base64,{base64.b64encode(buffer.getvalue()).decode()}"

    @classmethod
    def build_ticket_drafts(cls, booking_id: int, count: int) -> List[TicketDraft]:
        """Prepare numbers and QR images for a booking without touching the database"""

        drafts = []
        for sequence in range(1, count + 1):
            number = cls.ticket_number(booking_id, sequence)
            url = cls.verification_url(number)
            drafts.append(TicketDraft(
                sequence=sequence,
                ticket_number=number,
                verification_url=url,
                qr_code=cls.render_qr_data_uri(url)
            ))
        return drafts

    def issue_tickets(self, booking: Booking, drafts: List[TicketDraft]) -> List[Ticket]:
        """Persist one valid ticket per draft unless the booking already has tickets"""

        if booking.tickets:
            logger.info(f"Booking {booking.id} already has {len(booking.tickets)} tickets, skipping issue")
            return []

        issued = []
        for draft in drafts:
            ticket = Ticket(
                ticket_number=draft.ticket_number,
                qr_code=draft.qr_code,
                status=TicketStatus.VALID.value
            )
            booking.tickets.append(ticket)
            issued.append(ticket)

        self.db.flush()
        logger.info(f"Issued {len(issued)} tickets for booking {booking.id}")
        return issued

    def set_status_for_booking(self, booking: Booking, status: TicketStatus) -> int:
        """Set every ticket of a booking to the given status"""

        now = datetime.utcnow()
        for ticket in booking.tickets:
            ticket.status = status.value
            ticket.updated_at = now
        return len(booking.tickets)

    def get_booking_tickets(self, booking_id: int) -> List[Ticket]:
        return (
            self.db.query(Ticket)
            .filter(Ticket.booking_id == booking_id)
            .order_by(Ticket.id)
            .all()
        )

    def verify_ticket(self, ticket_number: str) -> TicketVerification:
        """Look up a scanned ticket and decide whether it admits entry"""

        ticket = (
            self.db.query(Ticket)
            .options(joinedload(Ticket.booking).joinedload(Booking.event))
            .filter(Ticket.ticket_number == ticket_number)
            .first()
        )
        if not ticket:
            raise NotFoundError("Ticket", ticket_number)

        booking = ticket.booking
        admissible = (
            ticket.status == TicketStatus.VALID.value
            and booking.booking_status == BookingStatus.CONFIRMED.value
        )

        return TicketVerification(
            ticket_number=ticket.ticket_number,
            status=ticket.status,
            booking_id=booking.id,
            booking_status=booking.booking_status,
            event_id=booking.event_id,
            event_title=booking.event.title,
            admissible=admissible
        )
