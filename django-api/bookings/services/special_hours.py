"""Special-hours validation.

Special hours are date-scoped exceptions to a field's weekly schedule:
closures, reduced windows and special prices.
"""

from datetime import date, time

from bookings.domain import Field, SpecialHours, SpecialHoursConflicts, TimeRange
from bookings.domain.errors import InvalidInputError, OutOfBusinessHoursError, OverlapConflictError
from bookings.stores.interfaces import SpecialHoursStore


class SpecialHoursValidator:
    """Checks a special-hours window before it is stored."""

    def __init__(self, store: SpecialHoursStore) -> None:
        self._store = store

    def validate_time_range(
        self,
        open_time: time | None,
        close_time: time | None,
        is_closed: bool,
    ) -> None:
        """Raises InvalidInputError unless closed or ``open_time < close_time``."""
        if is_closed:
            return
        if open_time is None or close_time is None:
            raise InvalidInputError("Opening and closing times are required for special hours")
        if open_time >= close_time:
            raise InvalidInputError("Opening time must be before closing time")

    def validate_within_business_hours(
        self,
        field: Field,
        day: date,
        open_time: time | None,
        close_time: time | None,
    ) -> None:
        """Raises OutOfBusinessHoursError if the window leaks out of the weekday's hours."""
        if open_time is None or close_time is None:
            return
        business_hours = field.hours_for(day)
        if business_hours is None:
            raise OutOfBusinessHoursError("The field does not operate on this day of the week")
        window = TimeRange(start=open_time, end=close_time)
        if not business_hours.window.contains(window):
            raise OutOfBusinessHoursError(
                f"Special hours ({window}) must be within business hours ({business_hours.window})"
            )

    def validate_no_overlaps(
        self,
        field_id: int,
        day: date,
        open_time: time | None,
        close_time: time | None,
        exclude_id: int | None = None,
    ) -> None:
        """Raises OverlapConflictError if the window intersects an open special-hours row."""
        if open_time is None or close_time is None:
            return
        window = TimeRange(start=open_time, end=close_time)
        for existing in self._store.find_by_field_and_date(field_id, day):
            if exclude_id is not None and existing.id == exclude_id:
                continue
            existing_window = existing.window
            if existing_window is None:
                continue
            if window.overlaps(existing_window):
                raise OverlapConflictError(str(window), str(existing_window))

    def get_conflicts(self, field: Field, day: date) -> SpecialHoursConflicts:
        """Pairwise overlaps and out-of-hours rows among a date's special hours."""
        rows = self._store.find_by_field_and_date(field.id, day)
        open_rows = [row for row in rows if row.window is not None]

        overlaps = []
        for index, first in enumerate(open_rows):
            for second in open_rows[index + 1:]:
                if first.window.overlaps(second.window):
                    overlaps.append((first, second))

        outside = []
        for row in open_rows:
            try:
                self.validate_within_business_hours(field, day, row.open_time, row.close_time)
            except OutOfBusinessHoursError:
                outside.append(row)

        return SpecialHoursConflicts(
            overlaps=tuple(overlaps),
            business_hour_conflicts=tuple(outside),
        )

    def validate(self, field: Field, special_hours: SpecialHours, exclude_id: int | None = None) -> None:
        """Run every check for a row about to be stored."""
        self.validate_time_range(
            special_hours.open_time, special_hours.close_time, special_hours.is_closed
        )
        if special_hours.is_closed:
            return
        self.validate_within_business_hours(
            field, special_hours.date, special_hours.open_time, special_hours.close_time
        )
        self.validate_no_overlaps(
            field.id,
            special_hours.date,
            special_hours.open_time,
            special_hours.close_time,
            exclude_id=exclude_id,
        )
