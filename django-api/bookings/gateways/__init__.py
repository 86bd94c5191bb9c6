from bookings.gateways.interfaces import PaymentGateway, PaymentGatewayError, PaymentStatus

__all__ = ["PaymentGateway", "PaymentGatewayError", "PaymentStatus"]
