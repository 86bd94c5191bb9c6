"""Unit tests for SpecialHoursValidator.

Run with: pytest tests/test_special_hours.py -v
"""

from datetime import time

import pytest

from bookings.domain import SpecialHours
from bookings.domain.errors import (
    InvalidInputError,
    OutOfBusinessHoursError,
    OverlapConflictError,
)
from bookings.services.special_hours import SpecialHoursValidator
from tests.fakes import MONDAY, SUNDAY


def window(open_time, close_time, **extra) -> SpecialHours:
    return SpecialHours(id=None, field_id=1, date=MONDAY, open_time=open_time, close_time=close_time, **extra)


@pytest.fixture
def validator(special_hours_store) -> SpecialHoursValidator:
    return SpecialHoursValidator(special_hours_store)


class TestValidateTimeRange:
    def test_closed_row_needs_no_times(self, validator):
        validator.validate_time_range(None, None, is_closed=True)

    def test_open_row_requires_both_times(self, validator):
        with pytest.raises(InvalidInputError):
            validator.validate_time_range(time(10), None, is_closed=False)

    def test_open_must_precede_close(self, validator):
        with pytest.raises(InvalidInputError):
            validator.validate_time_range(time(12), time(12), is_closed=False)


class TestValidateWithinBusinessHours:
    def test_window_inside_hours(self, validator, field):
        validator.validate_within_business_hours(field, MONDAY, time(9), time(22))

    def test_window_leaking_past_close(self, validator, field):
        with pytest.raises(OutOfBusinessHoursError) as exc_info:
            validator.validate_within_business_hours(field, MONDAY, time(20), time(23))
        assert "20:00-23:00" in exc_info.value.message

    def test_day_without_business_hours(self, validator, field):
        with pytest.raises(OutOfBusinessHoursError):
            validator.validate_within_business_hours(field, SUNDAY, time(10), time(12))


class TestValidateNoOverlaps:
    def test_overlapping_window_rejected(self, validator, special_hours_store):
        special_hours_store.add(window(time(10), time(12)))
        with pytest.raises(OverlapConflictError):
            validator.validate_no_overlaps(1, MONDAY, time(11), time(13))

    def test_adjacent_window_allowed(self, validator, special_hours_store):
        special_hours_store.add(window(time(10), time(12)))
        validator.validate_no_overlaps(1, MONDAY, time(12), time(14))

    def test_closed_rows_are_ignored(self, validator, special_hours_store):
        special_hours_store.add(window(None, None, is_closed=True, reason="Lluvia"))
        validator.validate_no_overlaps(1, MONDAY, time(10), time(12))

    def test_excluded_row_is_skipped(self, validator, special_hours_store):
        existing = special_hours_store.add(window(time(10), time(12)))
        validator.validate_no_overlaps(1, MONDAY, time(10), time(12), exclude_id=existing.id)


class TestConflicts:
    def test_reports_overlapping_pairs_and_out_of_hours_rows(self, validator, special_hours_store, field):
        first = special_hours_store.add(window(time(10), time(12)))
        second = special_hours_store.add(window(time(11), time(13)))
        late = special_hours_store.add(window(time(21), time(23)))

        conflicts = validator.get_conflicts(field, MONDAY)

        assert conflicts.overlaps == ((first, second),)
        assert conflicts.business_hour_conflicts == (late,)

    def test_validate_skips_window_checks_for_closures(self, validator, field):
        validator.validate(field, window(None, None, is_closed=True))
