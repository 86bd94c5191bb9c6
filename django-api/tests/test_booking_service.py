"""Unit tests for BookingService.

These run the lifecycle against in-memory stores and a fake gateway.
Run with: pytest tests/test_booking_service.py -v
"""

from datetime import date, datetime, time
from decimal import Decimal

import pytest

from bookings.domain import (
    Booking,
    BookingFilters,
    BookingRequest,
    BookingStatus,
    RecurrencePattern,
    RecurrenceType,
    SpecialHours,
)
from bookings.domain.errors import (
    BookingNotFoundError,
    CancellationWindowExceededError,
    ErrorCode,
    FieldClosedError,
    FieldNotFoundError,
    InvalidInputError,
    InvalidTransitionError,
    OutOfBusinessHoursError,
    PaymentRejectedError,
    SlotUnavailableError,
)
from bookings.services.booking_service import BookingService
from bookings.services.payments import PaymentConfirmationBridge
from bookings.services.pricing import PricingService
from tests.fakes import MONDAY, SUNDAY


class FullPricePricing(PricingService):
    def calculate_off_peak_discount(self, start_time: time) -> Decimal:
        return Decimal("0")


def request(start=time(10), end=time(11), day=MONDAY, **extra) -> BookingRequest:
    return BookingRequest(field_id=1, user_id=3, date=day, start_time=start, end_time=end, **extra)


def weekly(until: date) -> dict:
    return {
        "is_recurrent": True,
        "recurrence": RecurrencePattern(RecurrenceType.WEEKLY, 1, until),
    }


def confirmed_booking(booking_service, gateway, start=time(10), end=time(11), day=MONDAY) -> Booking:
    (booking,) = booking_service.create(request(start, end, day)).bookings
    gateway.approve(f"pay-{booking.id}", booking.id)
    return booking_service.confirm_booking(booking.id, f"pay-{booking.id}")


class TestCreate:
    """Tests for BookingService.create."""

    def test_single_booking_at_full_price(
        self, field_store, special_hours_store, booking_store, gateway, task_runner, clock
    ):
        """Monday 10:00-11:00 at 1000/hour without discount."""
        service = BookingService(
            field_store,
            special_hours_store,
            booking_store,
            PaymentConfirmationBridge(gateway),
            task_runner,
            pricing=FullPricePricing(),
            clock=clock,
        )

        result = service.create(request())

        (booking,) = result.bookings
        assert booking.status is BookingStatus.PENDING
        assert booking.base_price == Decimal("1000.00")
        assert booking.platform_fee == Decimal("100.00")
        assert booking.total_price == Decimal("100.00")
        assert result.price_breakdown.display_price == Decimal("1100.00")
        assert result.price_breakdown.user_payment == Decimal("100.00")
        assert result.price_breakdown.hours == 1
        assert result.message == "Booking created successfully"

    def test_off_peak_discount_applied(self, booking_service):
        result = booking_service.create(request(time(9), time(10)))
        assert result.price_breakdown.base_price == Decimal("850.00")
        assert result.price_breakdown.platform_fee == Decimal("85.00")
        assert result.price_breakdown.user_payment == Decimal("85.00")
        assert result.bookings[0].total_price == Decimal("85.00")

    def test_peak_hours_are_not_discounted(self, booking_service):
        result = booking_service.create(request(time(18), time(19)))
        assert result.price_breakdown.base_price == Decimal("1000.00")

    def test_special_price_used(self, booking_service, special_hours_store):
        special_hours_store.add(
            SpecialHours(
                id=None,
                field_id=1,
                date=MONDAY,
                open_time=time(18),
                close_time=time(22),
                special_price=Decimal("2000"),
            )
        )
        result = booking_service.create(request(time(20), time(21)))
        assert result.price_breakdown.is_special_hour
        assert result.price_breakdown.base_price == Decimal("2000.00")

    def test_closed_date_fails_with_reason(self, booking_service, special_hours_store):
        special_hours_store.add(
            SpecialHours(id=None, field_id=1, date=MONDAY, is_closed=True, reason="Maintenance")
        )
        with pytest.raises(FieldClosedError) as exc_info:
            booking_service.create(request())
        assert "Maintenance" in exc_info.value.message

    def test_overlap_with_confirmed_booking_fails(self, booking_service, gateway):
        confirmed_booking(booking_service, gateway)
        with pytest.raises(SlotUnavailableError):
            booking_service.create(request(time(10, 30), time(11, 30)))

    def test_pending_booking_does_not_block(self, booking_service):
        booking_service.create(request())
        second = booking_service.create(request())
        assert second.bookings[0].status is BookingStatus.PENDING

    def test_back_to_back_with_confirmed_booking(self, booking_service, gateway):
        confirmed_booking(booking_service, gateway)
        booking_service.create(request(time(11), time(12)))

    def test_outside_business_hours(self, booking_service):
        with pytest.raises(OutOfBusinessHoursError):
            booking_service.create(request(time(21), time(23)))

    def test_weekday_without_hours(self, booking_service):
        with pytest.raises(OutOfBusinessHoursError):
            booking_service.create(request(day=SUNDAY))

    def test_unknown_field(self, booking_service):
        with pytest.raises(FieldNotFoundError):
            booking_service.create(
                BookingRequest(field_id=99, user_id=3, date=MONDAY, start_time=time(10), end_time=time(11))
            )

    def test_inverted_range(self, booking_service):
        with pytest.raises(InvalidInputError):
            booking_service.create(request(time(11), time(10)))

    def test_checks_run_under_slot_lock(self, booking_service, booking_store):
        booking_service.create(request())
        assert booking_store.locks == [(1, MONDAY)]


class TestRecurringCreate:
    def test_weekly_series_skips_booked_date(self, booking_service, gateway):
        """Four weekly dates, the third already confirmed: three bookings share one series."""
        confirmed_booking(booking_service, gateway, day=date(2030, 1, 21))

        result = booking_service.create(request(**weekly(date(2030, 1, 28))))

        dates = [booking.date for booking in result.bookings]
        assert dates == [date(2030, 1, 7), date(2030, 1, 14), date(2030, 1, 28)]
        series_ids = {booking.recurrence_id for booking in result.bookings}
        assert len(series_ids) == 1
        assert series_ids.pop().startswith("rec_")
        assert all(booking.is_recurrent for booking in result.bookings)
        assert all(booking.status is BookingStatus.PENDING for booking in result.bookings)
        assert result.message == "3 recurring bookings created"

    def test_series_skips_closed_and_closed_weekday_dates(self, booking_service, special_hours_store):
        special_hours_store.add(
            SpecialHours(id=None, field_id=1, date=date(2030, 1, 9), is_closed=True, reason="Torneo")
        )
        pattern = RecurrencePattern(RecurrenceType.DAILY, 1, date(2030, 1, 13))

        result = booking_service.create(request(is_recurrent=True, recurrence=pattern))

        dates = [booking.date for booking in result.bookings]
        assert date(2030, 1, 9) not in dates
        assert date(2030, 1, 13) not in dates
        assert len(dates) == 5

    def test_first_date_unavailable_fails_whole_request(self, booking_service, gateway):
        confirmed_booking(booking_service, gateway)
        with pytest.raises(SlotUnavailableError):
            booking_service.create(request(**weekly(date(2030, 1, 28))))

    def test_recurrent_without_pattern(self, booking_service):
        with pytest.raises(InvalidInputError):
            booking_service.create(request(is_recurrent=True))

    def test_end_date_before_start(self, booking_service):
        with pytest.raises(InvalidInputError):
            booking_service.create(request(**weekly(date(2030, 1, 1))))


class TestConfirm:
    def test_pending_becomes_confirmed(self, booking_service, gateway):
        (booking,) = booking_service.create(request()).bookings
        gateway.approve("p1", booking.id)

        confirmed = booking_service.confirm_booking(booking.id, "p1")

        assert confirmed.status is BookingStatus.CONFIRMED
        assert booking_service.find_one(booking.id).status is BookingStatus.CONFIRMED

    def test_confirmed_is_returned_without_revalidating(self, booking_service, gateway):
        booking = confirmed_booking(booking_service, gateway)
        requested = len(gateway.requested)

        again = booking_service.confirm_booking(booking.id, "anything")

        assert again == booking
        assert len(gateway.requested) == requested

    def test_cancelled_cannot_be_confirmed(self, booking_service, gateway):
        (booking,) = booking_service.create(request()).bookings
        booking_service.cancel(booking.id)
        gateway.approve("p1", booking.id)
        with pytest.raises(InvalidTransitionError):
            booking_service.confirm_booking(booking.id, "p1")

    @pytest.mark.parametrize("status", ["pending", "rejected"])
    def test_unapproved_payment_rejected(self, booking_service, gateway, status):
        (booking,) = booking_service.create(request()).bookings
        gateway.approve("p1", booking.id, status=status)
        with pytest.raises(PaymentRejectedError):
            booking_service.confirm_booking(booking.id, "p1")
        assert booking_service.find_one(booking.id).status is BookingStatus.PENDING

    def test_payment_for_other_booking_rejected(self, booking_service, gateway):
        (booking,) = booking_service.create(request()).bookings
        gateway.approve("p1", booking.id + 1)
        with pytest.raises(PaymentRejectedError):
            booking_service.confirm_booking(booking.id, "p1")

    def test_gateway_failure_rejected(self, booking_service):
        (booking,) = booking_service.create(request()).bookings
        with pytest.raises(PaymentRejectedError):
            booking_service.confirm_booking(booking.id, "missing")

    def test_second_confirmation_of_same_slot_fails(self, booking_service, gateway):
        first, second = (booking_service.create(request()).bookings[0] for _ in range(2))
        gateway.approve("p1", first.id)
        gateway.approve("p2", second.id)
        booking_service.confirm_booking(first.id, "p1")

        with pytest.raises(SlotUnavailableError):
            booking_service.confirm_booking(second.id, "p2")
        assert booking_service.find_one(second.id).status is BookingStatus.PENDING

    def test_unknown_booking(self, booking_service):
        with pytest.raises(BookingNotFoundError) as exc_info:
            booking_service.confirm_booking(404, "p1")
        assert exc_info.value.code is ErrorCode.NOT_FOUND


class TestCancel:
    def test_cancel_appends_reason(self, booking_service):
        (booking,) = booking_service.create(request(notes="Cumple")).bookings

        cancelled = booking_service.cancel(booking.id, "Lluvia")

        assert cancelled.status is BookingStatus.CANCELLED
        assert cancelled.notes == "Cumple\nCancelled: Lluvia"

    def test_confirmed_booking_can_be_cancelled(self, booking_service, gateway):
        booking = confirmed_booking(booking_service, gateway)
        assert booking_service.cancel(booking.id).status is BookingStatus.CANCELLED

    def test_exactly_two_hours_ahead_fails(self, booking_service, clock):
        (booking,) = booking_service.create(request()).bookings
        clock.now = datetime(2030, 1, 7, 8, 0)
        with pytest.raises(CancellationWindowExceededError):
            booking_service.cancel(booking.id)

    def test_just_over_two_hours_ahead_succeeds(self, booking_service, clock):
        (booking,) = booking_service.create(request()).bookings
        clock.now = datetime(2030, 1, 7, 7, 59)
        assert booking_service.cancel(booking.id).status is BookingStatus.CANCELLED

    def test_cancelling_twice_is_a_no_op(self, booking_service):
        (booking,) = booking_service.create(request()).bookings
        first = booking_service.cancel(booking.id, "Lluvia")
        assert booking_service.cancel(booking.id, "Otra") == first

    def test_cancelled_slot_is_free_again(self, booking_service, gateway):
        booking = confirmed_booking(booking_service, gateway)
        booking_service.cancel(booking.id)
        booking_service.create(request())


class TestCancelSeries:
    def test_only_confirmed_members_are_cancelled(self, booking_service, gateway):
        result = booking_service.create(request(**weekly(date(2030, 1, 21))))
        first, second, third = result.bookings
        for booking in (first, second):
            gateway.approve(f"pay-{booking.id}", booking.id)
            booking_service.confirm_booking(booking.id, f"pay-{booking.id}")

        cancelled = booking_service.cancel_recurrent_series(first.recurrence_id, "Fin de temporada")

        assert [booking.id for booking in cancelled] == [first.id, second.id]
        assert all(booking.status is BookingStatus.CANCELLED for booking in cancelled)
        assert cancelled[0].notes == "Series cancelled: Fin de temporada"
        assert booking_service.find_one(third.id).status is BookingStatus.PENDING

    def test_unknown_series_cancels_nothing(self, booking_service):
        assert booking_service.cancel_recurrent_series("rec_missing") == []


class TestQueries:
    def test_find_all_filters(self, booking_service):
        booking_service.create(request())
        booking_service.create(request(time(18), time(19), day=date(2030, 1, 8)))

        monday = booking_service.find_all(BookingFilters(date=MONDAY))
        assert [booking.date for booking in monday] == [MONDAY]
        assert len(booking_service.find_all()) == 2
        assert booking_service.find_all(BookingFilters(status=BookingStatus.CONFIRMED)) == []

    def test_payment_status(self, booking_service, gateway):
        (pending,) = booking_service.create(request(time(18), time(19))).bookings
        paid = confirmed_booking(booking_service, gateway)

        assert booking_service.get_payment_status(pending.id).status == "pending"
        assert booking_service.get_payment_status(paid.id).status == "paid"
        booking_service.cancel(pending.id)
        assert booking_service.get_payment_status(pending.id).status == "cancelled"


class TestPaymentWebhook:
    def webhook(self, booking_id=42, status="approved", kind="payment", payment_id="p1") -> dict:
        return {
            "type": kind,
            "data": {
                "id": payment_id,
                "status": status,
                "external_reference": f"booking_{booking_id}",
            },
        }

    def test_approved_payment_confirms_booking(self, booking_service, booking_store, gateway):
        booking_store.bookings[42] = Booking(
            id=42,
            field_id=1,
            user_id=3,
            date=MONDAY,
            start_time=time(10),
            end_time=time(11),
            base_price=Decimal("1000.00"),
            platform_fee=Decimal("100.00"),
            total_price=Decimal("100.00"),
        )
        gateway.approve("p1", 42)

        booking_service.process_payment_webhook(self.webhook())

        assert booking_store.bookings[42].status is BookingStatus.CONFIRMED

    def test_missing_booking_is_swallowed(self, booking_service, task_runner):
        booking_service.process_payment_webhook(self.webhook())
        assert task_runner.submitted == 1

    def test_gateway_disagreement_leaves_booking_pending(self, booking_service, gateway):
        (booking,) = booking_service.create(request()).bookings
        gateway.approve("p1", booking.id, status="rejected")

        booking_service.process_payment_webhook(self.webhook(booking.id))

        assert booking_service.find_one(booking.id).status is BookingStatus.PENDING

    @pytest.mark.parametrize(
        "overrides",
        [{"kind": "merchant_order"}, {"status": "pending"}, {"payment_id": ""}],
    )
    def test_non_actionable_events_schedule_nothing(self, booking_service, task_runner, overrides):
        booking_service.process_payment_webhook(self.webhook(**overrides))
        assert task_runner.submitted == 0

    def test_foreign_reference_schedules_nothing(self, booking_service, task_runner):
        payload = self.webhook()
        payload["data"]["external_reference"] = "order_42"
        booking_service.process_payment_webhook(payload)
        assert task_runner.submitted == 0

    def test_missing_data_defaults_to_empty(self, booking_service, task_runner):
        booking_service.process_payment_webhook({"type": "payment"})
        assert task_runner.submitted == 0

    def test_payload_must_be_an_object(self, booking_service):
        with pytest.raises(InvalidInputError):
            booking_service.process_payment_webhook(["not", "a", "dict"])
