"""Payment confirmation bridge between the gateway and bookings.

Payments reference their booking through the external reference
``booking_<id>``. Validation fails closed: any doubt about the payment
means the booking is not confirmed.
"""

import re
from dataclasses import dataclass

import structlog

from bookings.gateways.interfaces import PaymentGateway, PaymentGatewayError

logger = structlog.get_logger(__name__)

_REFERENCE_PATTERN = re.compile(r"^booking_(\d+)$")


def booking_reference(booking_id: int) -> str:
    return f"booking_{booking_id}"


def booking_id_from_reference(reference: str) -> int | None:
    """Booking ID encoded in an external reference, or None if it is not one."""
    match = _REFERENCE_PATTERN.match(reference or "")
    return int(match.group(1)) if match else None


@dataclass(frozen=True)
class PaymentWebhookData:
    """Payment fields extracted from an inbound webhook."""

    id: str
    status: str
    external_reference: str

    @property
    def is_complete(self) -> bool:
        return bool(self.id and self.status and self.external_reference)


class PaymentConfirmationBridge:
    """Service validating gateway payments against bookings."""

    def __init__(self, gateway: PaymentGateway) -> None:
        self._gateway = gateway

    def validate_payment_for_booking(self, booking_id: int, payment_id: str) -> bool:
        """True only for an approved payment whose reference is this booking."""
        try:
            payment = self._gateway.get_payment_status(payment_id)
        except PaymentGatewayError as exc:
            logger.error(
                "payment_validation_failed",
                booking_id=booking_id,
                payment_id=payment_id,
                error=exc.message,
            )
            return False

        if not payment.is_approved:
            logger.warning(
                "payment_not_approved",
                booking_id=booking_id,
                payment_id=payment_id,
                status=payment.status,
            )
            return False

        expected = booking_reference(booking_id)
        if payment.external_reference != expected:
            logger.warning(
                "payment_reference_mismatch",
                booking_id=booking_id,
                payment_id=payment_id,
                reference=payment.external_reference,
                expected=expected,
            )
            return False

        return True

    def record_webhook(self, payment: PaymentWebhookData) -> None:
        if not payment.is_complete:
            logger.warning(
                "payment_webhook_incomplete",
                payment_id=payment.id,
                status=payment.status,
                reference=payment.external_reference,
            )
            return
        logger.info(
            "payment_webhook_received",
            payment_id=payment.id,
            status=payment.status,
            reference=payment.external_reference,
        )
