"""Availability checks for booking requests.

Only confirmed bookings hold a slot; pending and cancelled ones never block
a new request. Every check uses the half-open overlap of ``TimeRange``.
"""

from datetime import date, time

from bookings.domain import (
    BookingFilters,
    BookingStatus,
    Field,
    SpecialHours,
    TimeRange,
    TimeSlot,
)
from bookings.domain.errors import FieldClosedError, OutOfBusinessHoursError
from bookings.stores.interfaces import BookingStore


class AvailabilityChecker:
    """Service for slot availability."""

    def __init__(self, booking_store: BookingStore) -> None:
        self._bookings = booking_store

    def ensure_within_business_hours(
        self, field: Field, day: date, start_time: time, end_time: time
    ) -> None:
        """Raises OutOfBusinessHoursError unless the slot fits the weekday's hours."""
        business_hours = field.hours_for(day)
        if business_hours is None:
            raise OutOfBusinessHoursError("The field does not operate on this day of the week")
        if not business_hours.window.contains(TimeRange(start=start_time, end=end_time)):
            raise OutOfBusinessHoursError()

    def ensure_not_closed(self, special_hours: list[SpecialHours]) -> None:
        """Raises FieldClosedError if any special-hours row for the date is a closure."""
        for entry in special_hours:
            if entry.is_closed:
                raise FieldClosedError(entry.reason)

    def is_available(
        self,
        field_id: int,
        day: date,
        start_time: time,
        end_time: time,
        exclude_booking_id: int | None = None,
    ) -> bool:
        slot = TimeRange(start=start_time, end=end_time)
        return not any(
            booking.slot.overlaps(slot)
            for booking in self._confirmed_bookings(field_id, day)
            if booking.id != exclude_booking_id
        )

    def available_slots(
        self, field: Field, day: date, special_hours: list[SpecialHours]
    ) -> list[TimeSlot]:
        """Free one-hour slots of the day; slots overlapping a confirmed booking are left out."""
        business_hours = field.hours_for(day)
        if business_hours is None or any(entry.is_closed for entry in special_hours):
            return []
        taken = [booking.slot for booking in self._confirmed_bookings(field.id, day)]
        return [
            TimeSlot(start_time=slot.start, end_time=slot.end)
            for slot in business_hours.window.hourly_slots()
            if not any(slot.overlaps(booked) for booked in taken)
        ]

    def _confirmed_bookings(self, field_id: int, day: date):
        return self._bookings.find_bookings(
            BookingFilters(field_id=field_id, date=day, status=BookingStatus.CONFIRMED)
        )
