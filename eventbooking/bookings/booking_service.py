from typing import List, Optional
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy.orm import Session, joinedload
import secrets

from eventbooking.models import Booking, Event, Payment
from eventbooking.bookings.schemas import (
    BookingCreateRequest, BookingAmounts, BookablePage, BookingStatus,
    PaymentStatus, TicketStatus, CheckoutResult, to_booking_schema, Ticket as TicketSchema
)
from eventbooking.bookings.ticket_service import TicketService
from eventbooking.events.service import EventService
from eventbooking.promotions.service import PromotionService
from eventbooking.loyalty.service import LoyaltyService
from eventbooking.auth.schemas import CurrentUser
from eventbooking.auth.permissions import is_admin
from eventbooking.errors import (
    DomainError, NotFoundError, ForbiddenError, CapacityExceededError,
    InsufficientPointsError, InvalidPromotionError, AmountMismatchError,
    TransactionFailure, InvalidBookingStateError, ValidationFailedError
)
from eventbooking.logger import logger

AMOUNT_TOLERANCE = Decimal('0.01')
CENT = Decimal('0.01')
PAYMENT_METHOD = "card"

STATUS_ALIASES = {
    "confirmed": BookingStatus.CONFIRMED,
    "cancelled": BookingStatus.CANCELLED,
    "canceled": BookingStatus.CANCELLED,
}

class BookingService:
    """Service for the booking and checkout workflow"""

    def __init__(self, db: Session):
        self.db = db
        self.event_service = EventService(db)
        self.promotion_service = PromotionService(db)
        self.loyalty_service = LoyaltyService(db)
        self.ticket_service = TicketService(db)

    def get_bookable_page(self, event_id: int, customer: CurrentUser) -> BookablePage:
        """Availability, price and the customer's points for the booking form"""

        event = self.event_service.get_event(event_id)
        return BookablePage(
            event_id=event.id,
            title=event.title,
            available_tickets=self.event_service.available_tickets(event),
            ticket_price=event.ticket_price,
            loyalty_balance=self.loyalty_service.get_balance(customer.id)
        )

    @staticmethod
    def calculate_amounts(
        ticket_price: Decimal,
        number_of_tickets: int,
        promotion_discount: Decimal,
        loyalty_used: int
    ) -> BookingAmounts:
        """Recompute a booking's price breakdown from its inputs"""

        total = Decimal(ticket_price) * number_of_tickets
        loyalty_discount = LoyaltyService.loyalty_discount(loyalty_used, total, promotion_discount)
        discount = promotion_discount + loyalty_discount

        return BookingAmounts(
            total_amount=total,
            promotion_discount=promotion_discount,
            loyalty_discount=loyalty_discount,
            discount_amount=discount,
            final_amount=total - discount
        )

    def create_booking(self, request: BookingCreateRequest, customer: CurrentUser) -> Booking:
        """Validate a booking request and store it as pending"""

        try:
            booking = self._create_booking(request, customer)
        except DomainError as e:
            # Release the event row lock before reporting
            self.db.rollback()
            logger.warning(f"Booking rejected for customer {customer.id} on event {request.event_id}: {e}")
            raise

        logger.info(
            f"Created pending booking {booking.id} for customer {customer.id}: "
            f"{booking.number_of_tickets} tickets on event {booking.event_id}, final {booking.final_amount}"
        )
        return booking

    def _create_booking(self, request: BookingCreateRequest, customer: CurrentUser) -> Booking:
        # Lock the event row so concurrent bookings see each other's seats
        event = (
            self.db.query(Event)
            .filter(Event.id == request.event_id)
            .with_for_update()
            .first()
        )
        if not event:
            raise NotFoundError("Event", request.event_id)

        available = self.event_service.available_tickets(event)
        if request.number_of_tickets > available:
            raise CapacityExceededError(available=available)

        balance = self.loyalty_service.get_balance(customer.id)
        if request.loyalty_used > balance:
            raise InsufficientPointsError(requested=request.loyalty_used, balance=balance)

        subtotal = Decimal(event.ticket_price) * request.number_of_tickets
        promotion_discount = Decimal('0')
        if request.promo_code:
            promotion = self.promotion_service.find_valid_promotion(request.promo_code)
            if promotion is None:
                raise InvalidPromotionError(request.promo_code)
            promotion_discount = PromotionService.compute_discount(promotion, subtotal)

        amounts = self.calculate_amounts(
            event.ticket_price, request.number_of_tickets, promotion_discount, request.loyalty_used
        )
        self._check_amounts(request, amounts)

        total = amounts.total_amount.quantize(CENT, rounding=ROUND_HALF_UP)
        discount = amounts.discount_amount.quantize(CENT, rounding=ROUND_HALF_UP)
        final = total - discount

        booking = Booking(
            customer_id=customer.id,
            event_id=event.id,
            number_of_tickets=request.number_of_tickets,
            ticket_price=event.ticket_price,
            total_amount=total,
            discount_amount=discount,
            final_amount=final,
            promotion_code=request.promo_code or None,
            loyalty_used=request.loyalty_used,
            loyalty_earned=LoyaltyService.points_earned(final),
            payment_status=PaymentStatus.PENDING.value,
            booking_status=BookingStatus.PENDING.value,
            created_at=datetime.utcnow()
        )

        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        return booking

    @staticmethod
    def _check_amounts(request: BookingCreateRequest, amounts: BookingAmounts) -> None:
        submitted = {
            "total_amount": (request.total_amount, amounts.total_amount),
            "discount_amount": (request.discount_amount, amounts.discount_amount),
            "final_amount": (request.final_amount, amounts.final_amount),
        }
        for field, (given, expected) in submitted.items():
            if abs(Decimal(given) - expected) > AMOUNT_TOLERANCE:
                raise AmountMismatchError(field)

    def finalize_checkout(self, booking_id: int, customer: CurrentUser) -> CheckoutResult:
        """Confirm payment for a booking and issue its tickets in one transaction.

        Only a booking that is both confirmed and paid is returned unchanged; one an
        organizer confirmed before payment still goes through checkout.
        """

        booking = self._get_owned_booking(booking_id, customer)

        if booking.booking_status == BookingStatus.CANCELLED.value:
            raise InvalidBookingStateError(booking.booking_status)

        if (booking.booking_status == BookingStatus.CONFIRMED.value
                and booking.payment_status == PaymentStatus.PAID.value):
            logger.info(f"Booking {booking.id} already checked out, returning existing tickets")
            return self._checkout_result(booking)

        event_id = booking.event_id

        try:
            drafts = []
            if not booking.tickets:
                drafts = TicketService.build_ticket_drafts(booking.id, booking.number_of_tickets)

            self.loyalty_service.ensure_account(customer.id)

            if booking.loyalty_used > 0:
                self.loyalty_service.debit(customer.id, booking.loyalty_used, booking.id)

            earned = LoyaltyService.points_earned(Decimal(booking.final_amount))
            booking.loyalty_earned = earned
            if earned > 0:
                self.loyalty_service.credit(customer.id, earned, booking.id)

            if not self.db.query(Payment).filter(Payment.booking_id == booking.id).first():
                self.db.add(Payment(
                    booking_id=booking.id,
                    amount=booking.final_amount,
                    payment_method=PAYMENT_METHOD,
                    transaction_id=f"TXN{secrets.token_hex(8).upper()}",
                    status="completed"
                ))

            booking.payment_status = PaymentStatus.PAID.value
            booking.booking_status = BookingStatus.CONFIRMED.value

            self.ticket_service.issue_tickets(booking, drafts)

            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Checkout for booking {booking_id} rolled back")
            raise TransactionFailure(booking_id=booking_id, event_id=event_id) from e

        self.db.refresh(booking)
        logger.info(f"Checkout complete for booking {booking.id}: {len(booking.tickets)} tickets, {booking.loyalty_earned} points earned")
        return self._checkout_result(booking)

    def get_booking(self, booking_id: int, customer: CurrentUser) -> Booking:
        return self._get_owned_booking(booking_id, customer)

    def list_customer_bookings(self, customer_id: int) -> List[Booking]:
        """All bookings of a customer, newest first"""
        return (
            self.db.query(Booking)
            .options(joinedload(Booking.event))
            .filter(Booking.customer_id == customer_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .all()
        )

    def update_booking_status(self, booking_id: int, new_status: str, actor: CurrentUser) -> Booking:
        """Confirm or cancel a booking and flip its tickets to match"""

        target = STATUS_ALIASES.get((new_status or "").strip().lower())
        if target is None:
            raise ValidationFailedError("Invalid status.")

        booking = self._load_booking(booking_id)
        if not is_admin(actor) and booking.event.organizer_id != actor.id:
            raise ForbiddenError("Booking belongs to another organizer's event")

        ticket_status = TicketStatus.VALID if target == BookingStatus.CONFIRMED else TicketStatus.CANCELLED

        previous = booking.booking_status
        booking.booking_status = target.value
        changed = self.ticket_service.set_status_for_booking(booking, ticket_status)
        self.db.commit()
        self.db.refresh(booking)

        logger.info(
            f"User {actor.id} moved booking {booking.id} from {previous} to {booking.booking_status}; "
            f"{changed} tickets now {ticket_status.value}"
        )
        return booking

    def _load_booking(self, booking_id: int) -> Booking:
        booking = (
            self.db.query(Booking)
            .options(joinedload(Booking.event), joinedload(Booking.tickets))
            .filter(Booking.id == booking_id)
            .first()
        )
        if not booking:
            raise NotFoundError("Booking", booking_id)
        return booking

    def _get_owned_booking(self, booking_id: int, customer: CurrentUser) -> Booking:
        booking = self._load_booking(booking_id)
        if booking.customer_id != customer.id:
            raise ForbiddenError("Booking belongs to another customer")
        return booking

    def _checkout_result(self, booking: Booking) -> CheckoutResult:
        return CheckoutResult(
            booking=to_booking_schema(booking),
            tickets=[TicketSchema.model_validate(ticket) for ticket in booking.tickets]
        )
