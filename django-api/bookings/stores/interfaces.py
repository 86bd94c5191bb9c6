"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal

from bookings.domain import (
    Booking,
    BookingFilters,
    Field,
    FieldSearchCriteria,
    Review,
    SpecialHours,
)


class FieldStore(ABC):
    """Interface for field persistence operations."""

    @abstractmethod
    def get_field(self, field_id: int) -> Field | None:
        """Return a field by ID, or None if not found."""
        ...

    @abstractmethod
    def search_fields(self, criteria: FieldSearchCriteria) -> list[Field]:
        """Return fields matching the non-location criteria, ordered by name."""
        ...

    @abstractmethod
    def list_fields_by_owner(self, owner_id: int) -> list[Field]:
        ...

    @abstractmethod
    def update_rating(self, field_id: int, average_rating: Decimal, review_count: int) -> None:
        ...


class SpecialHoursStore(ABC):
    """Interface for special-hours persistence operations."""

    @abstractmethod
    def find_by_field_and_date(self, field_id: int, day: date) -> list[SpecialHours]:
        """Return all special-hours rows of a field for one date, ordered by ID."""
        ...

    @abstractmethod
    def find_in_range(self, field_id: int, start: date, end: date) -> list[SpecialHours]:
        """Return rows with ``start <= date <= end``, ordered by date."""
        ...

    @abstractmethod
    def add(self, special_hours: SpecialHours) -> SpecialHours:
        """Persist a new row and return it with its ID assigned."""
        ...


class BookingStore(ABC):
    """Interface for booking persistence operations."""

    @abstractmethod
    def get_booking(self, booking_id: int) -> Booking | None:
        """Return a booking by ID, or None if not found."""
        ...

    @abstractmethod
    def find_bookings(self, filters: BookingFilters) -> list[Booking]:
        """Return bookings matching every given filter, ordered by date and start time."""
        ...

    @abstractmethod
    def add_many(self, bookings: list[Booking]) -> list[Booking]:
        """Persist new bookings as one batch and return them with IDs assigned."""
        ...

    @abstractmethod
    def save(self, booking: Booking) -> Booking:
        """Update an existing booking."""
        ...

    @abstractmethod
    def save_many(self, bookings: list[Booking]) -> list[Booking]:
        """Update existing bookings in one transaction."""
        ...

    @abstractmethod
    def lock_slot(self, field_id: int, day: date) -> AbstractContextManager[None]:
        """Critical section serializing check-then-write sequences per field and date."""
        ...


class ReviewStore(ABC):
    """Interface for review persistence operations."""

    @abstractmethod
    def add(self, review: Review) -> Review:
        ...

    @abstractmethod
    def list_for_field(self, field_id: int) -> list[Review]:
        """Return a field's reviews, newest first."""
        ...

    @abstractmethod
    def exists(self, field_id: int, user_id: int) -> bool:
        """Check if the user already reviewed the field."""
        ...
