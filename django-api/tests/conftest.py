"""Pytest configuration and shared fixtures."""

from datetime import datetime
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from bookings.services.booking_service import BookingService
from bookings.services.field_service import FieldService
from bookings.services.payments import PaymentConfirmationBridge
from tests.fakes import (
    FakePaymentGateway,
    InlineExecutor,
    InMemoryBookingStore,
    InMemoryFieldStore,
    InMemoryReviewStore,
    InMemorySpecialHoursStore,
    NOW,
    make_field,
)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def field():
    return make_field()


@pytest.fixture
def field_store(field) -> InMemoryFieldStore:
    return InMemoryFieldStore([field])


@pytest.fixture
def special_hours_store() -> InMemorySpecialHoursStore:
    return InMemorySpecialHoursStore()


@pytest.fixture
def booking_store() -> InMemoryBookingStore:
    return InMemoryBookingStore()


@pytest.fixture
def review_store() -> InMemoryReviewStore:
    return InMemoryReviewStore()


@pytest.fixture
def gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def task_runner() -> InlineExecutor:
    return InlineExecutor()


@pytest.fixture
def clock():
    """Mutable clock; set ``clock.now`` to move time."""

    class Clock:
        now = NOW

        def __call__(self) -> datetime:
            return self.now

    return Clock()


@pytest.fixture
def booking_service(
    field_store, special_hours_store, booking_store, gateway, task_runner, clock
) -> BookingService:
    return BookingService(
        field_store=field_store,
        special_hours_store=special_hours_store,
        booking_store=booking_store,
        payments=PaymentConfirmationBridge(gateway),
        task_runner=task_runner,
        clock=clock,
    )


@pytest.fixture
def field_service(field_store, special_hours_store, booking_store, review_store) -> FieldService:
    return FieldService(
        field_store=field_store,
        special_hours_store=special_hours_store,
        booking_store=booking_store,
        review_store=review_store,
    )


@pytest.fixture
def db_field(db):
    """Persisted copy of the default test field."""
    from bookings import models
    from bookings.stores.django_store import business_hours_to_json

    template = make_field()
    return models.Field.objects.create(
        name=template.name,
        address=template.address,
        latitude=Decimal("-34.6037000"),
        longitude=Decimal("-58.3816000"),
        price_per_hour=template.price_per_hour.amount,
        business_hours=business_hours_to_json(template.business_hours),
        surface=template.surface,
        has_lighting=template.has_lighting,
        is_indoor=template.is_indoor,
        owner_id=template.owner_id,
    )


@pytest.fixture
def api_gateway(monkeypatch) -> FakePaymentGateway:
    """Routes the HTTP layer to a fake gateway and runs webhook tasks inline."""
    from bookings.handlers import dependencies

    fake = FakePaymentGateway()
    monkeypatch.setattr(dependencies, "get_payment_gateway", lambda: fake)
    monkeypatch.setattr(dependencies, "get_task_runner", InlineExecutor)
    return fake
