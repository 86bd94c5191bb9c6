from bookings.domain.models import (
    Booking,
    BookingFilters,
    BookingRequest,
    BookingResult,
    BookingStatus,
    BusinessHours,
    Field,
    FieldSearchCriteria,
    FieldStatistics,
    Review,
    SpecialHours,
    SpecialHoursConflicts,
    TimeSlot,
)
from bookings.domain.value_objects import (
    Coordinates,
    Money,
    PriceBreakdown,
    RecurrencePattern,
    RecurrenceType,
    TimeRange,
)

__all__ = [
    "Booking",
    "BookingFilters",
    "BookingRequest",
    "BookingResult",
    "BookingStatus",
    "BusinessHours",
    "Field",
    "FieldSearchCriteria",
    "FieldStatistics",
    "Review",
    "SpecialHours",
    "SpecialHoursConflicts",
    "TimeSlot",
    "Coordinates",
    "Money",
    "PriceBreakdown",
    "RecurrencePattern",
    "RecurrenceType",
    "TimeRange",
]
