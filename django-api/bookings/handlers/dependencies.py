"""Service wiring for the HTTP handlers.

Services are built per request from the Django stores; the payment gateway
client and the webhook task runner are process-wide.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from functools import lru_cache

from django.conf import settings
from django.db import connections
from django.utils import timezone

from bookings.gateways.http_gateway import HttpPaymentGateway
from bookings.gateways.interfaces import PaymentGateway
from bookings.services.booking_service import BookingService
from bookings.services.field_service import FieldService
from bookings.services.payments import PaymentConfirmationBridge
from bookings.stores.django_store import (
    DjangoBookingStore,
    DjangoFieldStore,
    DjangoReviewStore,
    DjangoSpecialHoursStore,
)


class DjangoTaskRunner(ThreadPoolExecutor):
    """Thread pool whose tasks release their database connections when done."""

    def submit(self, fn, /, *args, **kwargs):
        return super().submit(self._run, fn, *args, **kwargs)

    @staticmethod
    def _run(fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        finally:
            connections.close_all()


@lru_cache(maxsize=1)
def get_task_runner() -> ThreadPoolExecutor:
    return DjangoTaskRunner(max_workers=settings.WEBHOOK_WORKERS, thread_name_prefix="webhook")


@lru_cache(maxsize=1)
def get_payment_gateway() -> PaymentGateway:
    return HttpPaymentGateway(
        base_url=settings.PAYMENT_GATEWAY_URL,
        access_token=settings.PAYMENT_GATEWAY_TOKEN,
        timeout=settings.PAYMENT_GATEWAY_TIMEOUT,
    )


def local_now() -> datetime:
    """Naive wall-clock time in the configured time zone, comparable to booking dates."""
    return timezone.localtime().replace(tzinfo=None)


def get_booking_service() -> BookingService:
    return BookingService(
        field_store=DjangoFieldStore(),
        special_hours_store=DjangoSpecialHoursStore(),
        booking_store=DjangoBookingStore(),
        payments=PaymentConfirmationBridge(get_payment_gateway()),
        task_runner=get_task_runner(),
        clock=local_now,
    )


def get_field_service() -> FieldService:
    return FieldService(
        field_store=DjangoFieldStore(),
        special_hours_store=DjangoSpecialHoursStore(),
        booking_store=DjangoBookingStore(),
        review_store=DjangoReviewStore(),
    )
