"""Field catalog service: search, open slots, special hours, reviews and owner statistics."""

import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

import structlog

from bookings.domain import (
    BookingFilters,
    BookingStatus,
    Field,
    FieldSearchCriteria,
    FieldStatistics,
    Review,
    SpecialHours,
    SpecialHoursConflicts,
    TimeSlot,
)
from bookings.domain.errors import FieldNotFoundError, InvalidInputError
from bookings.services.availability import AvailabilityChecker
from bookings.services.special_hours import SpecialHoursValidator
from bookings.stores.interfaces import BookingStore, FieldStore, ReviewStore, SpecialHoursStore

logger = structlog.get_logger(__name__)

EARTH_RADIUS_KM = 6371.0
DEFAULT_NEARBY_RADIUS_KM = 20.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


class FieldService:
    """Service for field catalog operations."""

    def __init__(
        self,
        field_store: FieldStore,
        special_hours_store: SpecialHoursStore,
        booking_store: BookingStore,
        review_store: ReviewStore,
    ) -> None:
        self._fields = field_store
        self._special_hours = special_hours_store
        self._bookings = booking_store
        self._reviews = review_store
        self._availability = AvailabilityChecker(booking_store)
        self._validator = SpecialHoursValidator(special_hours_store)

    def get_field(self, field_id: int) -> Field:
        """Return a field by ID.

        Raises:
            FieldNotFoundError: If the field does not exist.
        """
        field = self._fields.get_field(field_id)
        if field is None:
            raise FieldNotFoundError(field_id)
        return field

    def search_fields(self, criteria: FieldSearchCriteria) -> list[Field]:
        fields = self._fields.search_fields(criteria)
        if criteria.latitude is None or criteria.longitude is None:
            return fields
        return self._within_radius(fields, criteria.latitude, criteria.longitude, criteria.radius_km)

    def find_nearby(
        self, latitude: float, longitude: float, radius_km: float | None = None
    ) -> list[Field]:
        """Fields within ``radius_km`` of a point, closest first."""
        radius = DEFAULT_NEARBY_RADIUS_KM if radius_km is None else radius_km
        if radius < 0:
            raise InvalidInputError("Radius must not be negative")
        fields = self._fields.search_fields(FieldSearchCriteria())
        return self._within_radius(fields, latitude, longitude, radius)

    def get_availability(self, field_id: int, day: date) -> list[TimeSlot]:
        field = self.get_field(field_id)
        special_hours = self._special_hours.find_by_field_and_date(field.id, day)
        return self._availability.available_slots(field, day, special_hours)

    def create_special_hours(self, special_hours: SpecialHours) -> SpecialHours:
        """Validate and store a special-hours row.

        Raises:
            FieldNotFoundError: If the field does not exist.
            InvalidInputError: If the time range is malformed.
            OutOfBusinessHoursError: If the window is outside business hours.
            OverlapConflictError: If the window overlaps another row of that date.
        """
        field = self.get_field(special_hours.field_id)
        self._validator.validate(field, special_hours)
        created = self._special_hours.add(special_hours)
        logger.info(
            "special_hours_created",
            field_id=field.id,
            date=created.date.isoformat(),
            is_closed=created.is_closed,
        )
        return created

    def get_special_hours(self, field_id: int, start: date, end: date) -> list[SpecialHours]:
        if end < start:
            raise InvalidInputError("End date must not be before start date")
        self.get_field(field_id)
        return self._special_hours.find_in_range(field_id, start, end)

    def get_special_hours_conflicts(self, field_id: int, day: date) -> SpecialHoursConflicts:
        return self._validator.get_conflicts(self.get_field(field_id), day)

    def create_review(self, review: Review) -> Review:
        """Store a review and refresh the field's rating aggregate.

        Raises:
            FieldNotFoundError: If the field does not exist.
            InvalidInputError: If the user already reviewed the field.
        """
        field = self.get_field(review.field_id)
        if self._reviews.exists(field.id, review.user_id):
            raise InvalidInputError("User has already reviewed this field")
        created = self._reviews.add(review)

        ratings = [entry.rating for entry in self._reviews.list_for_field(field.id)]
        average = (Decimal(sum(ratings)) / len(ratings)).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        )
        self._fields.update_rating(field.id, average, len(ratings))
        logger.info("review_created", field_id=field.id, rating=review.rating, average=str(average))
        return created

    def get_owner_statistics(self, owner_id: int) -> list[FieldStatistics]:
        """Per-field booking count and revenue; revenue counts confirmed bookings only."""
        statistics = []
        for field in self._fields.list_fields_by_owner(owner_id):
            bookings = [
                booking
                for booking in self._bookings.find_bookings(BookingFilters(field_id=field.id))
                if booking.status is not BookingStatus.CANCELLED
            ]
            revenue = sum(
                (b.total_price for b in bookings if b.status is BookingStatus.CONFIRMED),
                Decimal("0"),
            )
            statistics.append(
                FieldStatistics(
                    field_id=field.id,
                    name=field.name,
                    total_bookings=len(bookings),
                    revenue=revenue,
                    average_rating=field.average_rating,
                    review_count=field.review_count,
                )
            )
        return statistics

    @staticmethod
    def _within_radius(
        fields: list[Field], latitude: float, longitude: float, radius_km: float
    ) -> list[Field]:
        located = [
            (haversine_km(latitude, longitude, f.location.latitude, f.location.longitude), f)
            for f in fields
            if f.location is not None
        ]
        return [f for distance, f in sorted(located, key=lambda pair: pair[0]) if distance <= radius_km]
