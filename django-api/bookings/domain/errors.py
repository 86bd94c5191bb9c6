"""Domain error codes for the bookings module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    NOT_FOUND = "NOT_FOUND"
    OUT_OF_BUSINESS_HOURS = "OUT_OF_BUSINESS_HOURS"
    FIELD_CLOSED = "FIELD_CLOSED"
    SLOT_UNAVAILABLE = "SLOT_UNAVAILABLE"
    INVALID_INPUT = "INVALID_INPUT"
    OVERLAP_CONFLICT = "OVERLAP_CONFLICT"
    CANCELLATION_WINDOW_EXCEEDED = "CANCELLATION_WINDOW_EXCEEDED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    PAYMENT_REJECTED = "PAYMENT_REJECTED"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class FieldNotFoundError(DomainError):
    """Raised when a field is not found."""

    def __init__(self, field_id: int) -> None:
        super().__init__(code=ErrorCode.NOT_FOUND, message="Field not found")
        object.__setattr__(self, "field_id", field_id)


class BookingNotFoundError(DomainError):
    """Raised when a booking is not found."""

    def __init__(self, booking_id: int) -> None:
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message=f"Booking {booking_id} not found",
        )
        object.__setattr__(self, "booking_id", booking_id)


class OutOfBusinessHoursError(DomainError):
    """Raised when a window falls outside the weekday's business hours."""

    def __init__(self, message: str = "Requested time is outside business hours") -> None:
        super().__init__(code=ErrorCode.OUT_OF_BUSINESS_HOURS, message=message)


class FieldClosedError(DomainError):
    """Raised when a special-hours closure matches the requested date."""

    def __init__(self, reason: str | None) -> None:
        super().__init__(
            code=ErrorCode.FIELD_CLOSED,
            message=f"Field is closed on this date: {reason or 'no reason given'}",
        )
        object.__setattr__(self, "reason", reason)


class SlotUnavailableError(DomainError):
    """Raised when the slot overlaps a confirmed booking."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.SLOT_UNAVAILABLE,
            message="This time slot is not available",
        )


class InvalidInputError(DomainError):
    """Raised for malformed time ranges, recurrence patterns or payloads."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_INPUT, message=message)


class OverlapConflictError(DomainError):
    """Raised when two special-hours windows intersect."""

    def __init__(self, window: str, existing: str) -> None:
        super().__init__(
            code=ErrorCode.OVERLAP_CONFLICT,
            message=f"Schedule conflict: {window} overlaps with {existing}",
        )


class CancellationWindowExceededError(DomainError):
    """Raised when cancelling too close to the booking start."""

    def __init__(self, min_hours: int) -> None:
        super().__init__(
            code=ErrorCode.CANCELLATION_WINDOW_EXCEEDED,
            message=f"Bookings cannot be cancelled less than {min_hours} hours in advance",
        )


class InvalidTransitionError(DomainError):
    """Raised when a booking cannot move to the requested status."""

    def __init__(self, message: str = "A cancelled booking cannot be confirmed") -> None:
        super().__init__(code=ErrorCode.INVALID_TRANSITION, message=message)


class PaymentRejectedError(DomainError):
    """Raised when the payment is not approved or belongs to another booking."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.PAYMENT_REJECTED,
            message="Payment is invalid or not approved",
        )
