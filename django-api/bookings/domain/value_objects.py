"""Domain primitives that enforce validity at creation time."""

import re
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Self

from dateutil.relativedelta import relativedelta

CENTS = Decimal("0.01")

_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$")


def parse_time(value: str | time) -> time:
    """Parse an ``HH:MM`` (or ``HH:MM:SS``) wall-clock string."""
    if isinstance(value, time):
        return value
    match = _TIME_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Time must be in HH:MM format, got {value!r}")
    hours, minutes, seconds = match.groups()
    return time(int(hours), int(minutes), int(seconds or 0))


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def quantize(amount: Decimal) -> Decimal:
    """Round a monetary amount half-up to cents."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def weekday_index(day: date) -> int:
    """Weekday number used by business hours: 0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class TimeRange:
    """Half-open wall-clock interval ``[start, end)`` within a single day."""

    start: time
    end: time

    @classmethod
    def from_strings(cls, start: str | time, end: str | time) -> Self:
        return cls(start=parse_time(start), end=parse_time(end))

    @property
    def is_valid(self) -> bool:
        return self.start < self.end

    @property
    def hours(self) -> Decimal:
        """Duration in fractional hours."""
        return Decimal(_minutes(self.end) - _minutes(self.start)) / Decimal(60)

    def overlaps(self, other: "TimeRange") -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, other: "TimeRange") -> bool:
        return self.start <= other.start and other.end <= self.end

    def hourly_slots(self) -> list["TimeRange"]:
        """Split into consecutive one-hour slots; a trailing partial hour is dropped."""
        slots = []
        cursor = datetime.combine(date.min, self.start)
        limit = datetime.combine(date.min, self.end)
        while cursor + timedelta(hours=1) <= limit:
            following = cursor + timedelta(hours=1)
            slots.append(TimeRange(start=cursor.time(), end=following.time()))
            cursor = following
        return slots

    def __str__(self) -> str:
        return f"{format_time(self.start)}-{format_time(self.end)}"


@dataclass(frozen=True)
class Coordinates:
    """Latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90 <= self.latitude <= 90:
            raise ValueError("Latitude must be between -90 and 90")
        if not -180 <= self.longitude <= 180:
            raise ValueError("Longitude must be between -180 and 180")


class RecurrenceType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class RecurrencePattern:
    """Repeat rule for a booking series."""

    type: RecurrenceType
    interval: int
    end_date: date

    def __post_init__(self) -> None:
        if self.interval < 1:
            raise ValueError("Recurrence interval must be at least 1")

    def advance(self, current: date, steps: int = 1) -> date:
        if self.type is RecurrenceType.DAILY:
            return current + timedelta(days=self.interval * steps)
        if self.type is RecurrenceType.WEEKLY:
            return current + timedelta(weeks=self.interval * steps)
        return current + relativedelta(months=self.interval * steps)

    def dates_from(self, start: date) -> list[date]:
        """Occurrence dates from ``start`` up to and including ``end_date``."""
        occurrences = []
        steps = 0
        current = start
        while current <= self.end_date:
            occurrences.append(current)
            steps += 1
            # Monthly steps are taken from the start date so a 31st keeps landing on month end.
            current = self.advance(start, steps)
        return occurrences


PLATFORM_FEE_PERCENTAGE = Decimal("0.10")


@dataclass(frozen=True)
class PriceBreakdown:
    """Price of a booking request.

    ``user_payment`` is what the end user is charged through the payment
    gateway (the platform fee only); the owner collects ``base_price``
    separately.
    """

    base_price: Decimal
    platform_fee: Decimal
    display_price: Decimal
    user_payment: Decimal
    hours: Decimal
    is_special_hour: bool = False
    special_price: Decimal | None = None

    @classmethod
    def from_base(
        cls,
        base_price: Decimal,
        hours: Decimal,
        is_special_hour: bool = False,
        special_price: Decimal | None = None,
    ) -> Self:
        base = quantize(base_price)
        fee = quantize(base * PLATFORM_FEE_PERCENTAGE)
        return cls(
            base_price=base,
            platform_fee=fee,
            display_price=quantize(base + fee),
            user_payment=fee,
            hours=hours,
            is_special_hour=is_special_hour,
            special_price=special_price,
        )

    def with_base(self, base_price: Decimal) -> Self:
        recomputed = self.from_base(base_price, self.hours)
        return replace(
            self,
            base_price=recomputed.base_price,
            platform_fee=recomputed.platform_fee,
            display_price=recomputed.display_price,
            user_payment=recomputed.user_payment,
        )
