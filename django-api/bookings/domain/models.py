"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in bookings/models.py (persistence layer).
"""

import datetime as dt
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum

from bookings.domain.value_objects import (
    Coordinates,
    Money,
    PriceBreakdown,
    RecurrencePattern,
    TimeRange,
    weekday_index,
)


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class BusinessHours:
    """Recurring open window for one weekday (0 = Sunday)."""

    day: int
    open_time: time
    close_time: time

    def __post_init__(self) -> None:
        if not 0 <= self.day <= 6:
            raise ValueError("Business hours day must be between 0 and 6")

    @property
    def window(self) -> TimeRange:
        return TimeRange(start=self.open_time, end=self.close_time)


@dataclass(frozen=True)
class Field:
    """Domain representation of a bookable soccer field."""

    id: int
    name: str
    price_per_hour: Money
    owner_id: int
    business_hours: tuple[BusinessHours, ...] = ()
    address: str = ""
    location: Coordinates | None = None
    surface: str = ""
    has_lighting: bool = False
    is_indoor: bool = False
    average_rating: Decimal = Decimal("0")
    review_count: int = 0

    def __post_init__(self) -> None:
        days = [entry.day for entry in self.business_hours]
        if len(days) != len(set(days)):
            raise ValueError("At most one business hours entry per weekday")

    def hours_for(self, day: date) -> BusinessHours | None:
        """Business hours for the weekday of ``day``, or None when closed."""
        weekday = weekday_index(day)
        for entry in self.business_hours:
            if entry.day == weekday:
                return entry
        return None


@dataclass(frozen=True)
class SpecialHours:
    """Date-scoped override of a field's business hours."""

    id: int | None
    field_id: int
    date: date
    open_time: time | None = None
    close_time: time | None = None
    is_closed: bool = False
    reason: str | None = None
    special_price: Decimal | None = None

    @property
    def window(self) -> TimeRange | None:
        """Open window, or None for closures and incomplete rows."""
        if self.is_closed or self.open_time is None or self.close_time is None:
            return None
        return TimeRange(start=self.open_time, end=self.close_time)


@dataclass(frozen=True)
class Booking:
    """Domain representation of a booking."""

    id: int | None
    field_id: int
    user_id: int
    date: date
    start_time: time
    end_time: time
    base_price: Decimal
    platform_fee: Decimal
    total_price: Decimal
    status: BookingStatus = BookingStatus.PENDING
    notes: str | None = None
    is_recurrent: bool = False
    recurrence_id: str | None = None
    created_at: datetime | None = None

    @property
    def slot(self) -> TimeRange:
        return TimeRange(start=self.start_time, end=self.end_time)

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.start_time)


@dataclass(frozen=True)
class Review:
    """Domain representation of a field review."""

    id: int | None
    field_id: int
    user_id: int
    user_name: str
    rating: int
    comment: str
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        if not 1 <= self.rating <= 5:
            raise ValueError("Rating must be between 1 and 5")


@dataclass(frozen=True)
class TimeSlot:
    """A free slot of a field's day."""

    start_time: time
    end_time: time


@dataclass(frozen=True)
class BookingFilters:
    user_id: int | None = None
    field_id: int | None = None
    date: dt.date | None = None
    status: BookingStatus | None = None
    recurrence_id: str | None = None


@dataclass(frozen=True)
class FieldSearchCriteria:
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    surface: str | None = None
    has_lighting: bool | None = None
    is_indoor: bool | None = None
    min_rating: Decimal | None = None
    latitude: float | None = None
    longitude: float | None = None
    radius_km: float = 10.0


@dataclass(frozen=True)
class BookingRequest:
    """Validated input for creating a booking or a booking series."""

    field_id: int
    user_id: int
    date: date
    start_time: time
    end_time: time
    notes: str | None = None
    is_recurrent: bool = False
    recurrence: RecurrencePattern | None = None


@dataclass(frozen=True)
class BookingResult:
    bookings: tuple[Booking, ...]
    price_breakdown: PriceBreakdown
    message: str


@dataclass(frozen=True)
class SpecialHoursConflicts:
    overlaps: tuple[tuple[SpecialHours, SpecialHours], ...] = ()
    business_hour_conflicts: tuple[SpecialHours, ...] = ()


@dataclass(frozen=True)
class FieldStatistics:
    field_id: int
    name: str
    total_bookings: int
    revenue: Decimal
    average_rating: Decimal
    review_count: int

