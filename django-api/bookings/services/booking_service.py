"""Booking service - all booking business logic lives here.

Services:
- Depend only on interfaces (stores, gateways)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

Lifecycle: bookings are created ``pending``, become ``confirmed`` only through
a validated payment, and ``cancelled`` through an explicit cancellation.
Confirmed bookings are the only ones holding a slot.
"""

from collections.abc import Callable, Mapping
from concurrent.futures import Executor
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Any
from uuid import uuid4

import structlog

from bookings.domain import (
    Booking,
    BookingFilters,
    BookingRequest,
    BookingResult,
    BookingStatus,
    Field,
    PriceBreakdown,
    TimeRange,
)
from bookings.domain.errors import (
    BookingNotFoundError,
    CancellationWindowExceededError,
    DomainError,
    FieldNotFoundError,
    InvalidInputError,
    InvalidTransitionError,
    PaymentRejectedError,
    SlotUnavailableError,
)
from bookings.services.availability import AvailabilityChecker
from bookings.services.payments import (
    PaymentConfirmationBridge,
    PaymentWebhookData,
    booking_id_from_reference,
)
from bookings.services.pricing import PricingService
from bookings.stores.interfaces import BookingStore, FieldStore, SpecialHoursStore

logger = structlog.get_logger(__name__)

MIN_CANCELLATION_NOTICE = timedelta(hours=2)


@dataclass(frozen=True)
class BookingPaymentStatus:
    booking_id: int
    status: str
    message: str


class BookingService:
    """Service for booking lifecycle operations."""

    def __init__(
        self,
        field_store: FieldStore,
        special_hours_store: SpecialHoursStore,
        booking_store: BookingStore,
        payments: PaymentConfirmationBridge,
        task_runner: Executor,
        pricing: PricingService | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._fields = field_store
        self._special_hours = special_hours_store
        self._bookings = booking_store
        self._payments = payments
        self._tasks = task_runner
        self._pricing = pricing or PricingService()
        self._availability = AvailabilityChecker(booking_store)
        self._clock = clock

    def create(self, request: BookingRequest) -> BookingResult:
        """Create a pending booking, or a pending series for recurrent requests.

        Raises:
            FieldNotFoundError: If the field does not exist.
            InvalidInputError: If the time range or recurrence pattern is malformed.
            OutOfBusinessHoursError: If the slot is outside the weekday's hours.
            FieldClosedError: If special hours close the field that date.
            SlotUnavailableError: If a confirmed booking overlaps the slot.
        """
        if not TimeRange(start=request.start_time, end=request.end_time).is_valid:
            raise InvalidInputError("End time must be after start time")
        if request.is_recurrent:
            if request.recurrence is None:
                raise InvalidInputError("A recurrence pattern is required for recurrent bookings")
            if request.recurrence.end_date < request.date:
                raise InvalidInputError("Recurrence end date must not be before the booking date")

        field = self._get_field(request.field_id)
        self._availability.ensure_within_business_hours(
            field, request.date, request.start_time, request.end_time
        )
        special_hours = self._special_hours.find_by_field_and_date(field.id, request.date)
        self._availability.ensure_not_closed(special_hours)

        with self._bookings.lock_slot(field.id, request.date):
            if not self._availability.is_available(
                field.id, request.date, request.start_time, request.end_time
            ):
                raise SlotUnavailableError()

            pricing = self._pricing.calculate_price(
                field, request.start_time, request.end_time, request.date, special_hours
            )
            pricing = self._pricing.apply_discount(
                pricing, self._pricing.calculate_off_peak_discount(request.start_time)
            )

            if request.is_recurrent:
                bookings = self._create_series(request, field, pricing)
            else:
                bookings = self._bookings.add_many([self._new_booking(request, pricing)])

        logger.info(
            "bookings_created",
            field_id=field.id,
            user_id=request.user_id,
            count=len(bookings),
            recurrence_id=bookings[0].recurrence_id,
        )
        if len(bookings) == 1:
            message = "Booking created successfully"
        else:
            message = f"{len(bookings)} recurring bookings created"
        return BookingResult(bookings=tuple(bookings), price_breakdown=pricing, message=message)

    def find_all(self, filters: BookingFilters | None = None) -> list[Booking]:
        return self._bookings.find_bookings(filters or BookingFilters())

    def find_one(self, booking_id: int) -> Booking:
        """Return a booking by ID.

        Raises:
            BookingNotFoundError: If the booking does not exist.
        """
        booking = self._bookings.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    def confirm_booking(self, booking_id: int, payment_id: str) -> Booking:
        """Confirm a pending booking after validating its payment.

        Confirming a confirmed booking returns it unchanged.

        Raises:
            BookingNotFoundError: If the booking does not exist.
            InvalidTransitionError: If the booking is cancelled.
            PaymentRejectedError: If the payment is not approved for this booking.
            SlotUnavailableError: If another booking was confirmed for the slot first.
        """
        booking = self.find_one(booking_id)
        if booking.status is BookingStatus.CONFIRMED:
            return booking
        if booking.status is BookingStatus.CANCELLED:
            raise InvalidTransitionError()

        if not self._payments.validate_payment_for_booking(booking_id, payment_id):
            raise PaymentRejectedError()

        with self._bookings.lock_slot(booking.field_id, booking.date):
            booking = self.find_one(booking_id)
            if booking.status is BookingStatus.CONFIRMED:
                return booking
            if booking.status is BookingStatus.CANCELLED:
                raise InvalidTransitionError()
            if not self._availability.is_available(
                booking.field_id,
                booking.date,
                booking.start_time,
                booking.end_time,
                exclude_booking_id=booking.id,
            ):
                raise SlotUnavailableError()
            confirmed = self._bookings.save(replace(booking, status=BookingStatus.CONFIRMED))

        logger.info("booking_confirmed", booking_id=booking_id, payment_id=payment_id)
        return confirmed

    def cancel(self, booking_id: int, reason: str | None = None) -> Booking:
        """Cancel a booking at least two hours ahead of its start.

        Raises:
            BookingNotFoundError: If the booking does not exist.
            CancellationWindowExceededError: If two hours or less remain before the start.
        """
        booking = self.find_one(booking_id)
        if booking.status is BookingStatus.CANCELLED:
            return booking
        if booking.starts_at - self._clock() <= MIN_CANCELLATION_NOTICE:
            raise CancellationWindowExceededError(min_hours=2)

        cancelled = self._bookings.save(
            replace(
                booking,
                status=BookingStatus.CANCELLED,
                notes=_append_note(booking.notes, "Cancelled", reason),
            )
        )
        logger.info("booking_cancelled", booking_id=booking_id, reason=reason)
        return cancelled

    def cancel_recurrent_series(self, recurrence_id: str, reason: str | None = None) -> list[Booking]:
        """Cancel the confirmed members of a series; other members are left untouched."""
        confirmed = self._bookings.find_bookings(
            BookingFilters(recurrence_id=recurrence_id, status=BookingStatus.CONFIRMED)
        )
        cancelled = self._bookings.save_many(
            [
                replace(
                    booking,
                    status=BookingStatus.CANCELLED,
                    notes=_append_note(booking.notes, "Series cancelled", reason),
                )
                for booking in confirmed
            ]
        )
        logger.info("booking_series_cancelled", recurrence_id=recurrence_id, count=len(cancelled))
        return cancelled

    def get_payment_status(self, booking_id: int) -> BookingPaymentStatus:
        booking = self.find_one(booking_id)
        if booking.status is BookingStatus.CONFIRMED:
            return BookingPaymentStatus(booking_id, "paid", "Booking confirmed and paid")
        if booking.status is BookingStatus.PENDING:
            return BookingPaymentStatus(booking_id, "pending", "Booking awaiting payment")
        return BookingPaymentStatus(booking_id, booking.status.value, f"Booking is {booking.status.value}")

    def process_payment_webhook(self, payload: Mapping[str, Any]) -> None:
        """Record a gateway webhook and schedule confirmation for approved payments.

        Confirmation runs on the task runner; its failures are logged and never
        reach the caller.

        Raises:
            InvalidInputError: If the payload is not an object.
        """
        if not isinstance(payload, Mapping):
            raise InvalidInputError("Webhook payload must be an object")
        data = payload.get("data")
        if not isinstance(data, Mapping):
            data = {}
        reference = data.get("external_reference")
        payment = PaymentWebhookData(
            id=str(data.get("id") or ""),
            status=str(data.get("status") or ""),
            external_reference=reference if isinstance(reference, str) else "",
        )
        self._payments.record_webhook(payment)

        if payload.get("type") != "payment" or payment.status != "approved" or not payment.id:
            return
        booking_id = booking_id_from_reference(payment.external_reference)
        if booking_id is None:
            logger.warning(
                "payment_webhook_unknown_reference",
                payment_id=payment.id,
                reference=payment.external_reference,
            )
            return

        self._tasks.submit(self._confirm_from_webhook, booking_id, payment.id)
        logger.info("booking_confirmation_scheduled", booking_id=booking_id, payment_id=payment.id)

    def _confirm_from_webhook(self, booking_id: int, payment_id: str) -> None:
        try:
            self.confirm_booking(booking_id, payment_id)
        except DomainError as exc:
            logger.warning(
                "webhook_confirmation_failed",
                booking_id=booking_id,
                payment_id=payment_id,
                code=exc.code.value,
                error=exc.message,
            )
        except Exception:
            logger.exception(
                "webhook_confirmation_error",
                booking_id=booking_id,
                payment_id=payment_id,
            )

    def _get_field(self, field_id: int) -> Field:
        field = self._fields.get_field(field_id)
        if field is None:
            raise FieldNotFoundError(field_id)
        return field

    def _new_booking(
        self,
        request: BookingRequest,
        pricing: PriceBreakdown,
        day: date | None = None,
        recurrence_id: str | None = None,
    ) -> Booking:
        return Booking(
            id=None,
            field_id=request.field_id,
            user_id=request.user_id,
            date=day or request.date,
            start_time=request.start_time,
            end_time=request.end_time,
            base_price=pricing.base_price,
            platform_fee=pricing.platform_fee,
            total_price=pricing.user_payment,
            status=BookingStatus.PENDING,
            notes=request.notes,
            is_recurrent=recurrence_id is not None,
            recurrence_id=recurrence_id,
        )

    def _create_series(
        self, request: BookingRequest, field: Field, pricing: PriceBreakdown
    ) -> list[Booking]:
        """Expand a recurrent request; dates that cannot be booked are skipped."""
        recurrence_id = f"rec_{uuid4().hex}"
        bookings = []
        for day in request.recurrence.dates_from(request.date):
            if not self._is_bookable(field, day, request):
                logger.info("recurring_date_skipped", field_id=field.id, date=day.isoformat())
                continue
            bookings.append(self._new_booking(request, pricing, day=day, recurrence_id=recurrence_id))
        return self._bookings.add_many(bookings)

    def _is_bookable(self, field: Field, day: date, request: BookingRequest) -> bool:
        try:
            self._availability.ensure_within_business_hours(
                field, day, request.start_time, request.end_time
            )
            self._availability.ensure_not_closed(
                self._special_hours.find_by_field_and_date(field.id, day)
            )
        except DomainError:
            return False
        return self._availability.is_available(field.id, day, request.start_time, request.end_time)


def _append_note(notes: str | None, label: str, reason: str | None) -> str | None:
    if not reason:
        return notes
    entry = f"{label}: {reason}"
    return f"{notes}\n{entry}" if notes else entry
