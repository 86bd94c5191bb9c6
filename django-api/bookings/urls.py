from django.urls import path

from bookings.handlers import (
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

urlpatterns = [
    path("bookings", BookingListView.as_view(), name="booking-list"),
    path(
        "bookings/series/<str:recurrence_id>/cancel",
        BookingSeriesCancelView.as_view(),
        name="booking-series-cancel",
    ),
    path("bookings/<int:booking_id>", BookingDetailView.as_view(), name="booking-detail"),
    path("bookings/<int:booking_id>/confirm", BookingConfirmView.as_view(), name="booking-confirm"),
    path(
        "bookings/<int:booking_id>/payment-status",
        BookingPaymentStatusView.as_view(),
        name="booking-payment-status",
    ),
    path("webhooks/payment", PaymentWebhookView.as_view(), name="payment-webhook"),
    path("fields", FieldListView.as_view(), name="field-list"),
    path("fields/nearby", FieldNearbyView.as_view(), name="field-nearby"),
    path(
        "fields/owner/<int:owner_id>/statistics",
        OwnerStatisticsView.as_view(),
        name="owner-statistics",
    ),
    path("fields/<int:field_id>", FieldDetailView.as_view(), name="field-detail"),
    path(
        "fields/<int:field_id>/availability",
        FieldAvailabilityView.as_view(),
        name="field-availability",
    ),
    path(
        "fields/<int:field_id>/special-hours",
        SpecialHoursListView.as_view(),
        name="special-hours-list",
    ),
    path(
        "fields/<int:field_id>/special-hours/conflicts",
        SpecialHoursConflictsView.as_view(),
        name="special-hours-conflicts",
    ),
    path("fields/<int:field_id>/reviews", FieldReviewListView.as_view(), name="field-reviews"),
]
