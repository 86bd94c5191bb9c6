"""Payment gateway interface.

The gateway is the external service that charges the platform fee and
reports payment status back by payment ID.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


APPROVED = "approved"


@dataclass(frozen=True)
class PaymentStatus:
    """Payment as reported by the gateway."""

    id: str
    status: str
    external_reference: str
    amount: Decimal
    currency: str

    @property
    def is_approved(self) -> bool:
        return self.status == APPROVED


class PaymentGatewayError(Exception):
    """Raised when the gateway cannot be reached or answers unexpectedly."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class PaymentGateway(ABC):
    """Interface for payment status lookups."""

    @abstractmethod
    def get_payment_status(self, payment_id: str) -> PaymentStatus:
        """Return the current status of a payment.

        Raises:
            PaymentGatewayError: On transport failures or non-success responses.
        """
        ...
