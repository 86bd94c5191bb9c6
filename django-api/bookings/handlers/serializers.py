"""Serializers for request validation and for rendering domain models.

Input serializers turn request data into domain request objects; output
serializers read attributes off the frozen domain dataclasses.
"""

from rest_framework import serializers

from bookings.domain import (
    BookingFilters,
    BookingRequest,
    BookingStatus,
    FieldSearchCriteria,
    RecurrencePattern,
    RecurrenceType,
    Review,
    SpecialHours,
)
from bookings.services.pricing import PricingService

TIME_FORMAT = "%H:%M"
TIME_INPUT_FORMATS = ["%H:%M", "%H:%M:%S"]


def hhmm_field(**kwargs) -> serializers.TimeField:
    return serializers.TimeField(format=TIME_FORMAT, input_formats=TIME_INPUT_FORMATS, **kwargs)


# ----- Input -----


class RecurrencePatternSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=[t.value for t in RecurrenceType])
    interval = serializers.IntegerField(min_value=1)
    endDate = serializers.DateField()


class CreateBookingSerializer(serializers.Serializer):
    fieldId = serializers.IntegerField(min_value=1)
    userId = serializers.IntegerField(min_value=1)
    date = serializers.DateField()
    startTime = hhmm_field()
    endTime = hhmm_field()
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    isRecurrent = serializers.BooleanField(required=False, default=False)
    recurrencePattern = RecurrencePatternSerializer(required=False, allow_null=True)

    def to_request(self) -> BookingRequest:
        data = self.validated_data
        pattern = data.get("recurrencePattern")
        recurrence = None
        if pattern:
            recurrence = RecurrencePattern(
                type=RecurrenceType(pattern["type"]),
                interval=pattern["interval"],
                end_date=pattern["endDate"],
            )
        return BookingRequest(
            field_id=data["fieldId"],
            user_id=data["userId"],
            date=data["date"],
            start_time=data["startTime"],
            end_time=data["endTime"],
            notes=data.get("notes") or None,
            is_recurrent=data["isRecurrent"],
            recurrence=recurrence,
        )


class BookingFiltersSerializer(serializers.Serializer):
    userId = serializers.IntegerField(required=False, min_value=1)
    fieldId = serializers.IntegerField(required=False, min_value=1)
    date = serializers.DateField(required=False)
    status = serializers.ChoiceField(required=False, choices=[s.value for s in BookingStatus])

    def to_filters(self) -> BookingFilters:
        data = self.validated_data
        status = data.get("status")
        return BookingFilters(
            user_id=data.get("userId"),
            field_id=data.get("fieldId"),
            date=data.get("date"),
            status=BookingStatus(status) if status else None,
        )


class CancelBookingSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=500)


class ConfirmBookingSerializer(serializers.Serializer):
    paymentId = serializers.CharField(max_length=100)


class CreateSpecialHoursSerializer(serializers.Serializer):
    date = serializers.DateField()
    openTime = hhmm_field(required=False, allow_null=True)
    closeTime = hhmm_field(required=False, allow_null=True)
    isClosed = serializers.BooleanField()
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    specialPrice = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )

    def to_special_hours(self, field_id: int) -> SpecialHours:
        data = self.validated_data
        return SpecialHours(
            id=None,
            field_id=field_id,
            date=data["date"],
            open_time=data.get("openTime"),
            close_time=data.get("closeTime"),
            is_closed=data["isClosed"],
            reason=data.get("reason") or None,
            special_price=data.get("specialPrice"),
        )


class DateRangeSerializer(serializers.Serializer):
    startDate = serializers.DateField()
    endDate = serializers.DateField()


class DateQuerySerializer(serializers.Serializer):
    date = serializers.DateField()


class CreateReviewSerializer(serializers.Serializer):
    userId = serializers.IntegerField(min_value=1)
    userName = serializers.CharField(max_length=255)
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField()

    def to_review(self, field_id: int) -> Review:
        data = self.validated_data
        return Review(
            id=None,
            field_id=field_id,
            user_id=data["userId"],
            user_name=data["userName"],
            rating=data["rating"],
            comment=data["comment"],
        )


class FieldSearchSerializer(serializers.Serializer):
    minPrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    maxPrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    surface = serializers.CharField(required=False)
    hasLighting = serializers.BooleanField(required=False, allow_null=True, default=None)
    isIndoor = serializers.BooleanField(required=False, allow_null=True, default=None)
    latitude = serializers.FloatField(required=False, min_value=-90, max_value=90)
    longitude = serializers.FloatField(required=False, min_value=-180, max_value=180)
    radius = serializers.FloatField(required=False, min_value=1, max_value=100, default=10)
    minRating = serializers.DecimalField(
        max_digits=3, decimal_places=2, min_value=1, max_value=5, required=False
    )

    def to_criteria(self) -> FieldSearchCriteria:
        data = self.validated_data
        return FieldSearchCriteria(
            min_price=data.get("minPrice"),
            max_price=data.get("maxPrice"),
            surface=data.get("surface"),
            has_lighting=data.get("hasLighting"),
            is_indoor=data.get("isIndoor"),
            min_rating=data.get("minRating"),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            radius_km=data["radius"],
        )


class NearbySerializer(serializers.Serializer):
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)
    radius = serializers.FloatField(required=False, allow_null=True, default=None)


# ----- Output -----


class BusinessHoursSerializer(serializers.Serializer):
    day = serializers.IntegerField()
    openTime = hhmm_field(source="open_time")
    closeTime = hhmm_field(source="close_time")


class FieldSerializer(serializers.Serializer):
    """Serializer for Field domain model."""

    id = serializers.IntegerField()
    name = serializers.CharField()
    address = serializers.CharField()
    latitude = serializers.FloatField(source="location.latitude", default=None)
    longitude = serializers.FloatField(source="location.longitude", default=None)
    pricePerHour = serializers.DecimalField(source="price_per_hour.amount", max_digits=10, decimal_places=2)
    displayPricePerHour = serializers.SerializerMethodField()
    businessHours = BusinessHoursSerializer(source="business_hours", many=True)
    surface = serializers.CharField()
    hasLighting = serializers.BooleanField(source="has_lighting")
    isIndoor = serializers.BooleanField(source="is_indoor")
    averageRating = serializers.DecimalField(source="average_rating", max_digits=3, decimal_places=2)
    reviewCount = serializers.IntegerField(source="review_count")
    ownerId = serializers.IntegerField(source="owner_id")

    def get_displayPricePerHour(self, field) -> str:
        return str(PricingService().display_price_per_hour(field))


class BookingSerializer(serializers.Serializer):
    """Serializer for Booking domain model."""

    id = serializers.IntegerField()
    fieldId = serializers.IntegerField(source="field_id")
    userId = serializers.IntegerField(source="user_id")
    date = serializers.DateField()
    startTime = hhmm_field(source="start_time")
    endTime = hhmm_field(source="end_time")
    status = serializers.CharField(source="status.value")
    basePrice = serializers.DecimalField(source="base_price", max_digits=10, decimal_places=2)
    platformFee = serializers.DecimalField(source="platform_fee", max_digits=10, decimal_places=2)
    totalPrice = serializers.DecimalField(source="total_price", max_digits=10, decimal_places=2)
    notes = serializers.CharField(allow_null=True)
    isRecurrent = serializers.BooleanField(source="is_recurrent")
    recurrenceId = serializers.CharField(source="recurrence_id", allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at", allow_null=True)


class PriceBreakdownSerializer(serializers.Serializer):
    """Serializer for PriceBreakdown value object."""

    basePrice = serializers.DecimalField(source="base_price", max_digits=10, decimal_places=2)
    platformFee = serializers.DecimalField(source="platform_fee", max_digits=10, decimal_places=2)
    displayPrice = serializers.DecimalField(source="display_price", max_digits=10, decimal_places=2)
    userPayment = serializers.DecimalField(source="user_payment", max_digits=10, decimal_places=2)
    hours = serializers.DecimalField(max_digits=5, decimal_places=2)
    isSpecialHour = serializers.BooleanField(source="is_special_hour")
    specialPrice = serializers.DecimalField(
        source="special_price", max_digits=10, decimal_places=2, allow_null=True
    )


class BookingResultSerializer(serializers.Serializer):
    bookings = BookingSerializer(many=True)
    priceBreakdown = PriceBreakdownSerializer(source="price_breakdown")
    message = serializers.CharField()


class PaymentStatusSerializer(serializers.Serializer):
    bookingId = serializers.IntegerField(source="booking_id")
    status = serializers.CharField()
    message = serializers.CharField()


class SpecialHoursSerializer(serializers.Serializer):
    """Serializer for SpecialHours domain model."""

    id = serializers.IntegerField()
    fieldId = serializers.IntegerField(source="field_id")
    date = serializers.DateField()
    openTime = hhmm_field(source="open_time", allow_null=True)
    closeTime = hhmm_field(source="close_time", allow_null=True)
    isClosed = serializers.BooleanField(source="is_closed")
    reason = serializers.CharField(allow_null=True)
    specialPrice = serializers.DecimalField(
        source="special_price", max_digits=10, decimal_places=2, allow_null=True
    )


class SpecialHoursConflictsSerializer(serializers.Serializer):
    overlaps = serializers.SerializerMethodField()
    businessHourConflicts = SpecialHoursSerializer(source="business_hour_conflicts", many=True)

    def get_overlaps(self, conflicts) -> list[dict]:
        return [
            {
                "first": SpecialHoursSerializer(first).data,
                "second": SpecialHoursSerializer(second).data,
            }
            for first, second in conflicts.overlaps
        ]


class TimeSlotSerializer(serializers.Serializer):
    startTime = hhmm_field(source="start_time")
    endTime = hhmm_field(source="end_time")


class ReviewSerializer(serializers.Serializer):
    """Serializer for Review domain model."""

    id = serializers.IntegerField()
    fieldId = serializers.IntegerField(source="field_id")
    userId = serializers.IntegerField(source="user_id")
    userName = serializers.CharField(source="user_name")
    rating = serializers.IntegerField()
    comment = serializers.CharField()
    createdAt = serializers.DateTimeField(source="created_at", allow_null=True)


class FieldStatisticsSerializer(serializers.Serializer):
    fieldId = serializers.IntegerField(source="field_id")
    name = serializers.CharField()
    totalBookings = serializers.IntegerField(source="total_bookings")
    revenue = serializers.DecimalField(max_digits=12, decimal_places=2)
    averageRating = serializers.DecimalField(source="average_rating", max_digits=3, decimal_places=2)
    reviewCount = serializers.IntegerField(source="review_count")
