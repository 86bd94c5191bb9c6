"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import structlog
from django.conf import settings
from django.core.cache import cache
from rest_framework import status
from rest_framework.exceptions import ParseError, ValidationError
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from bookings.domain.errors import DomainError, ErrorCode
from bookings.handlers import dependencies
from bookings.handlers.serializers import (
    BookingFiltersSerializer,
    BookingResultSerializer,
    BookingSerializer,
    CancelBookingSerializer,
    ConfirmBookingSerializer,
    CreateBookingSerializer,
    CreateReviewSerializer,
    CreateSpecialHoursSerializer,
    DateQuerySerializer,
    DateRangeSerializer,
    FieldSearchSerializer,
    FieldSerializer,
    FieldStatisticsSerializer,
    NearbySerializer,
    PaymentStatusSerializer,
    ReviewSerializer,
    SpecialHoursConflictsSerializer,
    SpecialHoursSerializer,
    TimeSlotSerializer,
)
from bookings.signals import availability_cache_key

logger = structlog.get_logger(__name__)


def error_response(code: ErrorCode, message: str, http_status: int, details=None) -> Response:
    body = {"code": code.value, "message": message}
    if details is not None:
        body["details"] = details
    return Response({"error": body}, status=http_status)


def domain_error_response(error: DomainError) -> Response:
    if error.code is ErrorCode.NOT_FOUND:
        http_status = status.HTTP_404_NOT_FOUND
    else:
        http_status = status.HTTP_400_BAD_REQUEST
    return error_response(error.code, error.message, http_status)


def validated(serializer_class, data):
    serializer = serializer_class(data=data)
    serializer.is_valid(raise_exception=True)
    return serializer


def query_data(request: Request) -> dict:
    # Plain dict so omitted boolean params stay omitted instead of reading as False.
    return request.query_params.dict()


class DomainAPIView(APIView):
    """APIView that renders domain and validation errors in the error envelope."""

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            logger.info("domain_error", code=exc.code.value, path=self.request.path)
            return domain_error_response(exc)
        if isinstance(exc, ValidationError):
            return error_response(
                ErrorCode.INVALID_INPUT, "Invalid request", status.HTTP_400_BAD_REQUEST, exc.detail
            )
        if isinstance(exc, ParseError):
            return error_response(
                ErrorCode.INVALID_INPUT, "Malformed request body", status.HTTP_400_BAD_REQUEST
            )
        return super().handle_exception(exc)


# ----- Bookings -----


class BookingListView(DomainAPIView):
    """Handler for GET/POST /api/bookings"""

    def get(self, request: Request) -> Response:
        filters = validated(BookingFiltersSerializer, query_data(request)).to_filters()
        bookings = dependencies.get_booking_service().find_all(filters)
        return Response(BookingSerializer(bookings, many=True).data)

    def post(self, request: Request) -> Response:
        booking_request = validated(CreateBookingSerializer, request.data).to_request()
        result = dependencies.get_booking_service().create(booking_request)
        return Response(BookingResultSerializer(result).data, status=status.HTTP_201_CREATED)


class BookingDetailView(DomainAPIView):
    """Handler for GET/DELETE /api/bookings/{booking_id}"""

    def get(self, request: Request, booking_id: int) -> Response:
        booking = dependencies.get_booking_service().find_one(booking_id)
        return Response(BookingSerializer(booking).data)

    def delete(self, request: Request, booking_id: int) -> Response:
        data = request.data or query_data(request)
        reason = validated(CancelBookingSerializer, data).validated_data.get("reason")
        booking = dependencies.get_booking_service().cancel(booking_id, reason or None)
        return Response(BookingSerializer(booking).data)


class BookingConfirmView(DomainAPIView):
    """Handler for POST /api/bookings/{booking_id}/confirm"""

    def post(self, request: Request, booking_id: int) -> Response:
        payment_id = validated(ConfirmBookingSerializer, request.data).validated_data["paymentId"]
        booking = dependencies.get_booking_service().confirm_booking(booking_id, payment_id)
        return Response(BookingSerializer(booking).data)


class BookingPaymentStatusView(DomainAPIView):
    """Handler for GET /api/bookings/{booking_id}/payment-status"""

    def get(self, request: Request, booking_id: int) -> Response:
        payment_status = dependencies.get_booking_service().get_payment_status(booking_id)
        return Response(PaymentStatusSerializer(payment_status).data)


class BookingSeriesCancelView(DomainAPIView):
    """Handler for POST /api/bookings/series/{recurrence_id}/cancel"""

    def post(self, request: Request, recurrence_id: str) -> Response:
        reason = validated(CancelBookingSerializer, request.data).validated_data.get("reason")
        cancelled = dependencies.get_booking_service().cancel_recurrent_series(
            recurrence_id, reason or None
        )
        return Response(
            {
                "recurrenceId": recurrence_id,
                "cancelled": len(cancelled),
                "bookings": BookingSerializer(cancelled, many=True).data,
            }
        )


class PaymentWebhookView(APIView):
    """Handler for POST /api/webhooks/payment

    Always answers 200 so the gateway does not retry; problems are logged.
    """

    def post(self, request: Request) -> Response:
        try:
            dependencies.get_booking_service().process_payment_webhook(request.data)
        except (ParseError, DomainError) as exc:
            logger.warning("payment_webhook_rejected", error=str(exc))
        except Exception:
            logger.exception("payment_webhook_failed")
        return Response({"message": "Webhook received"})


# ----- Fields -----


class FieldListView(DomainAPIView):
    """Handler for GET /api/fields"""

    def get(self, request: Request) -> Response:
        criteria = validated(FieldSearchSerializer, query_data(request)).to_criteria()
        fields = dependencies.get_field_service().search_fields(criteria)
        return Response(FieldSerializer(fields, many=True).data)


class FieldNearbyView(DomainAPIView):
    """Handler for GET /api/fields/nearby"""

    def get(self, request: Request) -> Response:
        data = validated(NearbySerializer, query_data(request)).validated_data
        fields = dependencies.get_field_service().find_nearby(data["lat"], data["lng"], data["radius"])
        return Response(FieldSerializer(fields, many=True).data)


class FieldDetailView(DomainAPIView):
    """Handler for GET /api/fields/{field_id}"""

    def get(self, request: Request, field_id: int) -> Response:
        field = dependencies.get_field_service().get_field(field_id)
        return Response(FieldSerializer(field).data)


class FieldAvailabilityView(DomainAPIView):
    """Handler for GET /api/fields/{field_id}/availability?date=YYYY-MM-DD

    Cached per field and date; booking and special-hours signals drop the entry.
    """

    def get(self, request: Request, field_id: int) -> Response:
        day = validated(DateQuerySerializer, query_data(request)).validated_data["date"]
        key = availability_cache_key(field_id, day)
        slots = cache.get(key)
        if slots is None:
            available = dependencies.get_field_service().get_availability(field_id, day)
            slots = list(TimeSlotSerializer(available, many=True).data)
            cache.set(key, slots, settings.AVAILABILITY_CACHE_TTL)
        return Response({"fieldId": field_id, "date": day.isoformat(), "slots": slots})


class SpecialHoursListView(DomainAPIView):
    """Handler for GET/POST /api/fields/{field_id}/special-hours"""

    def get(self, request: Request, field_id: int) -> Response:
        data = validated(DateRangeSerializer, query_data(request)).validated_data
        rows = dependencies.get_field_service().get_special_hours(
            field_id, data["startDate"], data["endDate"]
        )
        return Response(SpecialHoursSerializer(rows, many=True).data)

    def post(self, request: Request, field_id: int) -> Response:
        special_hours = validated(CreateSpecialHoursSerializer, request.data).to_special_hours(field_id)
        created = dependencies.get_field_service().create_special_hours(special_hours)
        return Response(SpecialHoursSerializer(created).data, status=status.HTTP_201_CREATED)


class SpecialHoursConflictsView(DomainAPIView):
    """Handler for GET /api/fields/{field_id}/special-hours/conflicts?date=YYYY-MM-DD"""

    def get(self, request: Request, field_id: int) -> Response:
        day = validated(DateQuerySerializer, query_data(request)).validated_data["date"]
        conflicts = dependencies.get_field_service().get_special_hours_conflicts(field_id, day)
        return Response(SpecialHoursConflictsSerializer(conflicts).data)


class FieldReviewListView(DomainAPIView):
    """Handler for POST /api/fields/{field_id}/reviews"""

    def post(self, request: Request, field_id: int) -> Response:
        review = validated(CreateReviewSerializer, request.data).to_review(field_id)
        created = dependencies.get_field_service().create_review(review)
        return Response(ReviewSerializer(created).data, status=status.HTTP_201_CREATED)


class OwnerStatisticsView(DomainAPIView):
    """Handler for GET /api/fields/owner/{owner_id}/statistics"""

    def get(self, request: Request, owner_id: int) -> Response:
        statistics = dependencies.get_field_service().get_owner_statistics(owner_id)
        return Response(FieldStatisticsSerializer(statistics, many=True).data)
