"""HTTP client for the payment gateway service."""

from decimal import Decimal, InvalidOperation
from urllib.parse import quote

import httpx
import structlog

from bookings.gateways.interfaces import PaymentGateway, PaymentGatewayError, PaymentStatus

logger = structlog.get_logger(__name__)


class HttpPaymentGateway(PaymentGateway):
    """Looks up payments at ``GET {base_url}/payments/{payment_id}``.

    The gateway answers with ``{"id", "status", "external_reference",
    "amount", "currency"}``.
    """

    def __init__(
        self,
        base_url: str,
        access_token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._client = httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def get_payment_status(self, payment_id: str) -> PaymentStatus:
        logger.info("payment_status_requested", payment_id=payment_id)
        try:
            response = self._client.get(f"/payments/{quote(payment_id, safe='')}")
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            logger.error("payment_gateway_request_failed", payment_id=payment_id, error=str(exc))
            raise PaymentGatewayError(f"Request failed: {exc}") from exc

        if response.status_code == 404:
            raise PaymentGatewayError(f"Payment {payment_id} not found", status_code=404)
        if response.status_code >= 400:
            raise PaymentGatewayError(
                f"Gateway error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
            return PaymentStatus(
                id=str(body.get("id", payment_id)),
                status=str(body["status"]),
                external_reference=str(body.get("external_reference") or ""),
                amount=Decimal(str(body.get("amount", 0))),
                currency=str(body.get("currency", "")),
            )
        except (ValueError, KeyError, TypeError, AttributeError, InvalidOperation) as exc:
            raise PaymentGatewayError(f"Malformed gateway response: {exc}") from exc
