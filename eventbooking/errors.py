"""Domain error codes for the booking platform."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    INSUFFICIENT_POINTS = "INSUFFICIENT_POINTS"
    INVALID_PROMOTION = "INVALID_PROMOTION"
    AMOUNT_MISMATCH = "AMOUNT_MISMATCH"
    TRANSACTION_FAILURE = "TRANSACTION_FAILURE"
    INVALID_BOOKING_STATE = "INVALID_BOOKING_STATE"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CONFLICT = "CONFLICT"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"


HTTP_STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.CAPACITY_EXCEEDED: 409,
    ErrorCode.INSUFFICIENT_POINTS: 400,
    ErrorCode.INVALID_PROMOTION: 400,
    ErrorCode.AMOUNT_MISMATCH: 400,
    ErrorCode.TRANSACTION_FAILURE: 500,
    ErrorCode.INVALID_BOOKING_STATE: 409,
    ErrorCode.VALIDATION_FAILED: 422,
    ErrorCode.CONFLICT: 409,
    ErrorCode.AUTHENTICATION_FAILED: 401,
}


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_CODE[self.code]


class NotFoundError(DomainError):
    """Raised when an event, booking, ticket or promotion does not exist."""

    def __init__(self, resource: str, resource_id=None) -> None:
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message=f"{resource} not found",
        )
        self.resource = resource
        self.resource_id = resource_id


class ForbiddenError(DomainError):
    """Raised when the acting user may not touch the resource."""

    def __init__(self, message: str = "You do not have access to this resource") -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)


class CapacityExceededError(DomainError):
    """Raised when more tickets are requested than remain."""

    def __init__(self, available: int) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_EXCEEDED,
            message=f"Only {available} tickets available",
        )
        self.available = available


class InsufficientPointsError(DomainError):
    """Raised when a customer spends more loyalty points than they hold."""

    def __init__(self, requested: int, balance: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_POINTS,
            message="Insufficient loyalty points",
        )
        self.requested = requested
        self.balance = balance


class InvalidPromotionError(DomainError):
    """Raised when a promotion code is unknown, inactive or out of its window."""

    def __init__(self, code: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_PROMOTION,
            message="Invalid promotion code",
        )
        self.promo_code = code


class AmountMismatchError(DomainError):
    """Raised when submitted amounts disagree with the server's computation."""

    def __init__(self, field: str) -> None:
        super().__init__(
            code=ErrorCode.AMOUNT_MISMATCH,
            message="Amount calculation mismatch. Please try again.",
        )
        self.field = field


class TransactionFailure(DomainError):
    """Raised when checkout finalization rolls back.

    The underlying exception is chained as ``__cause__`` and never shown to
    the client.
    """

    def __init__(self, booking_id: int, event_id: int = None) -> None:
        super().__init__(
            code=ErrorCode.TRANSACTION_FAILURE,
            message="Failed to process checkout. Please try again.",
        )
        self.booking_id = booking_id
        self.event_id = event_id


class InvalidBookingStateError(DomainError):
    """Raised when a booking's state does not allow the operation."""

    def __init__(self, status: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_BOOKING_STATE,
            message=f"Booking cannot be processed. Status: {status}",
        )
        self.status = status


class ValidationFailedError(DomainError):
    """Raised for input rejected by business rules."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.VALIDATION_FAILED, message=message)


class ConflictError(DomainError):
    """Raised when a unique value already exists."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.CONFLICT, message=message)


class AuthenticationError(DomainError):
    """Raised when credentials are wrong."""

    def __init__(self, message: str = "Incorrect email or password") -> None:
        super().__init__(code=ErrorCode.AUTHENTICATION_FAILED, message=message)
