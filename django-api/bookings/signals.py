"""Django signals for cache invalidation."""

from django.core.cache import cache
from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from bookings.models import Booking, SpecialHours


def availability_cache_key(field_id: int, day) -> str:
    return f"fields:{field_id}:availability:{day.isoformat()}"


@receiver([post_save, post_delete], sender=Booking)
def invalidate_booking_availability(sender, instance, **kwargs):
    """Invalidate the open-slot listing when a booking of that day changes."""
    key = availability_cache_key(instance.field_id, instance.date)
    transaction.on_commit(lambda: cache.delete(key))


@receiver([post_save, post_delete], sender=SpecialHours)
def invalidate_special_hours_availability(sender, instance, **kwargs):
    """Invalidate the open-slot listing when special hours of that day change."""
    key = availability_cache_key(instance.field_id, instance.date)
    transaction.on_commit(lambda: cache.delete(key))
