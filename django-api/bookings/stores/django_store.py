"""Django ORM implementations of the stores.

Each store queries the ORM and converts rows to domain models.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from decimal import Decimal

from django.db import transaction

from bookings import models
from bookings.domain import (
    Booking,
    BookingFilters,
    BookingStatus,
    BusinessHours,
    Coordinates,
    Field,
    FieldSearchCriteria,
    Money,
    Review,
    SpecialHours,
)
from bookings.domain.value_objects import format_time, parse_time
from bookings.stores.interfaces import BookingStore, FieldStore, ReviewStore, SpecialHoursStore


def to_field(row: models.Field) -> Field:
    location = None
    if row.latitude is not None and row.longitude is not None:
        location = Coordinates(latitude=float(row.latitude), longitude=float(row.longitude))
    return Field(
        id=row.pk,
        name=row.name,
        price_per_hour=Money(amount=Decimal(row.price_per_hour)),
        owner_id=row.owner_id,
        business_hours=tuple(
            BusinessHours(
                day=entry["day"],
                open_time=parse_time(entry["open_time"]),
                close_time=parse_time(entry["close_time"]),
            )
            for entry in row.business_hours
        ),
        address=row.address,
        location=location,
        surface=row.surface,
        has_lighting=row.has_lighting,
        is_indoor=row.is_indoor,
        average_rating=Decimal(row.average_rating),
        review_count=row.review_count,
    )


def business_hours_to_json(entries: tuple[BusinessHours, ...]) -> list[dict]:
    return [
        {
            "day": entry.day,
            "open_time": format_time(entry.open_time),
            "close_time": format_time(entry.close_time),
        }
        for entry in entries
    ]


def to_special_hours(row: models.SpecialHours) -> SpecialHours:
    return SpecialHours(
        id=row.pk,
        field_id=row.field_id,
        date=row.date,
        open_time=row.open_time,
        close_time=row.close_time,
        is_closed=row.is_closed,
        reason=row.reason,
        special_price=row.special_price,
    )


def to_booking(row: models.Booking) -> Booking:
    return Booking(
        id=row.pk,
        field_id=row.field_id,
        user_id=row.user_id,
        date=row.date,
        start_time=row.start_time,
        end_time=row.end_time,
        base_price=row.base_price,
        platform_fee=row.platform_fee,
        total_price=row.total_price,
        status=BookingStatus(row.status),
        notes=row.notes,
        is_recurrent=row.is_recurrent,
        recurrence_id=row.recurrence_id,
        created_at=row.created_at,
    )


def to_review(row: models.Review) -> Review:
    return Review(
        id=row.pk,
        field_id=row.field_id,
        user_id=row.user_id,
        user_name=row.user_name,
        rating=row.rating,
        comment=row.comment,
        created_at=row.created_at,
    )


class DjangoFieldStore(FieldStore):
    """Field store backed by the Django ORM."""

    def get_field(self, field_id: int) -> Field | None:
        row = models.Field.objects.filter(pk=field_id).first()
        return to_field(row) if row else None

    def search_fields(self, criteria: FieldSearchCriteria) -> list[Field]:
        queryset = models.Field.objects.all()
        if criteria.min_price is not None:
            queryset = queryset.filter(price_per_hour__gte=criteria.min_price)
        if criteria.max_price is not None:
            queryset = queryset.filter(price_per_hour__lte=criteria.max_price)
        if criteria.surface:
            queryset = queryset.filter(surface=criteria.surface)
        if criteria.has_lighting is not None:
            queryset = queryset.filter(has_lighting=criteria.has_lighting)
        if criteria.is_indoor is not None:
            queryset = queryset.filter(is_indoor=criteria.is_indoor)
        if criteria.min_rating is not None:
            queryset = queryset.filter(average_rating__gte=criteria.min_rating)
        return [to_field(row) for row in queryset]

    def list_fields_by_owner(self, owner_id: int) -> list[Field]:
        return [to_field(row) for row in models.Field.objects.filter(owner_id=owner_id)]

    def update_rating(self, field_id: int, average_rating: Decimal, review_count: int) -> None:
        models.Field.objects.filter(pk=field_id).update(
            average_rating=average_rating,
            review_count=review_count,
        )


class DjangoSpecialHoursStore(SpecialHoursStore):
    """Special-hours store backed by the Django ORM."""

    def find_by_field_and_date(self, field_id: int, day: date) -> list[SpecialHours]:
        rows = models.SpecialHours.objects.filter(field_id=field_id, date=day).order_by("id")
        return [to_special_hours(row) for row in rows]

    def find_in_range(self, field_id: int, start: date, end: date) -> list[SpecialHours]:
        rows = models.SpecialHours.objects.filter(field_id=field_id, date__range=(start, end))
        return [to_special_hours(row) for row in rows]

    def add(self, special_hours: SpecialHours) -> SpecialHours:
        row = models.SpecialHours.objects.create(
            field_id=special_hours.field_id,
            date=special_hours.date,
            open_time=special_hours.open_time,
            close_time=special_hours.close_time,
            is_closed=special_hours.is_closed,
            reason=special_hours.reason,
            special_price=special_hours.special_price,
        )
        return to_special_hours(row)


class DjangoBookingStore(BookingStore):
    """Booking store backed by the Django ORM."""

    def get_booking(self, booking_id: int) -> Booking | None:
        row = models.Booking.objects.filter(pk=booking_id).first()
        return to_booking(row) if row else None

    def find_bookings(self, filters: BookingFilters) -> list[Booking]:
        queryset = models.Booking.objects.all()
        if filters.user_id is not None:
            queryset = queryset.filter(user_id=filters.user_id)
        if filters.field_id is not None:
            queryset = queryset.filter(field_id=filters.field_id)
        if filters.date is not None:
            queryset = queryset.filter(date=filters.date)
        if filters.status is not None:
            queryset = queryset.filter(status=filters.status.value)
        if filters.recurrence_id is not None:
            queryset = queryset.filter(recurrence_id=filters.recurrence_id)
        return [to_booking(row) for row in queryset.order_by("date", "start_time", "id")]

    def add_many(self, bookings: list[Booking]) -> list[Booking]:
        with transaction.atomic():
            # Rows are created one by one so every backend returns primary keys.
            rows = [
                models.Booking.objects.create(
                    field_id=booking.field_id,
                    user_id=booking.user_id,
                    date=booking.date,
                    start_time=booking.start_time,
                    end_time=booking.end_time,
                    status=booking.status.value,
                    base_price=booking.base_price,
                    platform_fee=booking.platform_fee,
                    total_price=booking.total_price,
                    notes=booking.notes,
                    is_recurrent=booking.is_recurrent,
                    recurrence_id=booking.recurrence_id,
                )
                for booking in bookings
            ]
        return [to_booking(row) for row in rows]

    def save(self, booking: Booking) -> Booking:
        row = models.Booking.objects.get(pk=booking.id)
        row.status = booking.status.value
        row.notes = booking.notes
        # save() rather than update() so post_save signals fire.
        row.save(update_fields=["status", "notes"])
        return to_booking(row)

    def save_many(self, bookings: list[Booking]) -> list[Booking]:
        with transaction.atomic():
            return [self.save(booking) for booking in bookings]

    @contextmanager
    def lock_slot(self, field_id: int, day: date) -> Iterator[None]:
        # Row lock on the field serializes every date of that field; SQLite ignores it
        # and relies on its database-level write lock instead.
        with transaction.atomic():
            list(models.Field.objects.select_for_update().filter(pk=field_id).values_list("pk", flat=True))
            yield


class DjangoReviewStore(ReviewStore):
    """Review store backed by the Django ORM."""

    def add(self, review: Review) -> Review:
        row = models.Review.objects.create(
            field_id=review.field_id,
            user_id=review.user_id,
            user_name=review.user_name,
            rating=review.rating,
            comment=review.comment,
        )
        return to_review(row)

    def list_for_field(self, field_id: int) -> list[Review]:
        return [to_review(row) for row in models.Review.objects.filter(field_id=field_id)]

    def exists(self, field_id: int, user_id: int) -> bool:
        return models.Review.objects.filter(field_id=field_id, user_id=user_id).exists()
