"""Pricing service - price breakdowns for booking requests.

The end user pays only the platform fee through the payment gateway; the
field owner collects the base price directly.
"""

from datetime import date, time
from decimal import Decimal

from bookings.domain import Field, PriceBreakdown, SpecialHours, TimeRange
from bookings.domain.errors import InvalidInputError
from bookings.domain.value_objects import PLATFORM_FEE_PERCENTAGE, quantize

OFF_PEAK_DISCOUNT = Decimal("0.15")
OFF_PEAK_START = time(8, 0)
OFF_PEAK_END = time(16, 0)


class PricingService:
    """Service for price calculations."""

    def calculate_price(
        self,
        field: Field,
        start_time: time,
        end_time: time,
        day: date,
        special_hours: list[SpecialHours] | None = None,
    ) -> PriceBreakdown:
        """Return the undiscounted breakdown for one booking.

        Raises:
            InvalidInputError: If the end time is not after the start time.
        """
        slot = TimeRange(start=start_time, end=end_time)
        if not slot.is_valid:
            raise InvalidInputError("End time must be after start time")
        hours = slot.hours

        special = self._special_price_for(day, special_hours or [])
        if special is not None:
            return PriceBreakdown.from_base(
                special * hours,
                hours,
                is_special_hour=True,
                special_price=special,
            )
        return PriceBreakdown.from_base(field.price_per_hour.amount * hours, hours)

    def calculate_off_peak_discount(self, start_time: time) -> Decimal:
        if OFF_PEAK_START <= start_time < OFF_PEAK_END:
            return OFF_PEAK_DISCOUNT
        return Decimal("0")

    def apply_discount(self, breakdown: PriceBreakdown, percentage: Decimal) -> PriceBreakdown:
        """Discount the base price; the fee stays at exactly 10% of the new base."""
        if not percentage:
            return breakdown
        discounted = breakdown.base_price - breakdown.base_price * percentage
        return breakdown.with_base(discounted)

    def display_price_per_hour(self, field: Field, special_price: Decimal | None = None) -> Decimal:
        base = special_price or field.price_per_hour.amount
        return quantize(base * (1 + PLATFORM_FEE_PERCENTAGE))

    def platform_fee_per_hour(self, field: Field, special_price: Decimal | None = None) -> Decimal:
        base = special_price or field.price_per_hour.amount
        return quantize(base * PLATFORM_FEE_PERCENTAGE)

    @staticmethod
    def _special_price_for(day: date, special_hours: list[SpecialHours]) -> Decimal | None:
        for entry in special_hours:
            if entry.date == day and entry.special_price:
                return entry.special_price
        return None
