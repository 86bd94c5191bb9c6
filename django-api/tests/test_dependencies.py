"""Tests for the HTTP layer's service wiring."""

from datetime import datetime
from unittest import mock

from bookings.handlers import dependencies


class TestDjangoTaskRunner:
    def test_runs_task_and_releases_connections(self):
        runner = dependencies.DjangoTaskRunner(max_workers=1)
        try:
            with mock.patch.object(dependencies.connections, "close_all") as close_all:
                result = runner.submit(lambda a, b: a + b, 2, b=3).result(timeout=5)
        finally:
            runner.shutdown(wait=True)

        assert result == 5
        close_all.assert_called_once_with()

    def test_failing_task_still_releases_connections(self):
        runner = dependencies.DjangoTaskRunner(max_workers=1)
        try:
            with mock.patch.object(dependencies.connections, "close_all") as close_all:
                future = runner.submit(lambda: 1 / 0)
                assert isinstance(future.exception(timeout=5), ZeroDivisionError)
        finally:
            runner.shutdown(wait=True)

        close_all.assert_called_once_with()


def test_local_now_is_naive():
    now = dependencies.local_now()
    assert isinstance(now, datetime)
    assert now.tzinfo is None


def test_services_are_built_from_settings(settings):
    dependencies.get_payment_gateway.cache_clear()
    settings.PAYMENT_GATEWAY_URL = "https://payments.test"
    try:
        assert dependencies.get_booking_service() is not None
        assert dependencies.get_field_service() is not None
    finally:
        dependencies.get_payment_gateway().close()
        dependencies.get_payment_gateway.cache_clear()
