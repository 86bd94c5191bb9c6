from bookings.handlers.views import (
    BookingConfirmView,
    BookingDetailView,
    BookingListView,
    BookingPaymentStatusView,
    BookingSeriesCancelView,
    FieldAvailabilityView,
    FieldDetailView,
    FieldListView,
    FieldNearbyView,
    FieldReviewListView,
    OwnerStatisticsView,
    PaymentWebhookView,
    SpecialHoursConflictsView,
    SpecialHoursListView,
)

__all__ = [
    "BookingConfirmView",
    "BookingDetailView",
    "BookingListView",
    "BookingPaymentStatusView",
    "BookingSeriesCancelView",
    "FieldAvailabilityView",
    "FieldDetailView",
    "FieldListView",
    "FieldNearbyView",
    "FieldReviewListView",
    "OwnerStatisticsView",
    "PaymentWebhookView",
    "SpecialHoursConflictsView",
    "SpecialHoursListView",
]
