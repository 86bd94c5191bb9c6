"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

from django.db import models
from django.db.models import Q


class Field(models.Model):
    """Persistence model for soccer fields."""

    name = models.CharField(max_length=255)
    address = models.CharField(max_length=255, blank=True)
    latitude = models.DecimalField(max_digits=10, decimal_places=7, null=True, blank=True)
    longitude = models.DecimalField(max_digits=10, decimal_places=7, null=True, blank=True)
    price_per_hour = models.DecimalField(max_digits=10, decimal_places=2)
    # [{"day": 0-6, "open_time": "HH:MM", "close_time": "HH:MM"}], 0 = Sunday
    business_hours = models.JSONField(default=list)
    surface = models.CharField(max_length=50, blank=True)
    has_lighting = models.BooleanField(default=False)
    is_indoor = models.BooleanField(default=False)
    average_rating = models.DecimalField(max_digits=3, decimal_places=2, default=0)
    review_count = models.PositiveIntegerField(default=0)
    owner_id = models.PositiveIntegerField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class SpecialHours(models.Model):
    """Persistence model for date-scoped schedule overrides."""

    field = models.ForeignKey(Field, on_delete=models.CASCADE, related_name="special_hours")
    date = models.DateField()
    open_time = models.TimeField(null=True, blank=True)
    close_time = models.TimeField(null=True, blank=True)
    is_closed = models.BooleanField(default=False)
    reason = models.CharField(max_length=255, blank=True, null=True)
    special_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["date", "id"]
        indexes = [
            models.Index(fields=["field", "date"], name="idx_special_hours_date"),
        ]

    def __str__(self) -> str:
        return f"{self.field.name} - {self.date}"


class Booking(models.Model):
    """Persistence model for bookings."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"
        CANCELLED = "cancelled", "Cancelled"

    field = models.ForeignKey(Field, on_delete=models.CASCADE, related_name="bookings")
    user_id = models.PositiveIntegerField()
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    base_price = models.DecimalField(max_digits=10, decimal_places=2)
    platform_fee = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    notes = models.TextField(blank=True, null=True)
    is_recurrent = models.BooleanField(default=False)
    recurrence_id = models.CharField(max_length=64, blank=True, null=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["date", "start_time"]
        indexes = [
            models.Index(fields=["date", "field"], name="idx_booking_date_field"),
            models.Index(fields=["user_id", "date"], name="idx_booking_user_date"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["field", "date", "start_time"],
                condition=Q(status="confirmed"),
                name="uniq_confirmed_booking_start",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.field.name} - {self.date} {self.start_time}"


class Review(models.Model):
    """Persistence model for field reviews."""

    field = models.ForeignKey(Field, on_delete=models.CASCADE, related_name="reviews")
    user_id = models.PositiveIntegerField()
    user_name = models.CharField(max_length=255)
    rating = models.PositiveSmallIntegerField()
    comment = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["rating"], name="idx_review_rating"),
        ]
        constraints = [
            models.UniqueConstraint(fields=["user_id", "field"], name="uniq_review_per_user"),
        ]

    def __str__(self) -> str:
        return f"{self.user_name} - {self.rating}"
