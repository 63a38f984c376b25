"""
Error taxonomy for payment creation and confirmation.

Every error carries a stable machine-readable ``code`` and the HTTP status
the API layer answers with. Validation errors are raised before any
gateway is contacted.
"""
from typing import Any, Dict, Optional


class PaymentError(Exception):
    """Base class for all payment domain errors."""

    code = "PAYMENT_ERROR"
    status_code = 400

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class InvalidBookingDetails(PaymentError):
    """Client payload could not be normalized into a booking intent."""

    code = "INVALID_BOOKING_DATA"


class ReferenceNotFound(PaymentError):
    code = "REFERENCE_NOT_FOUND"

    def __init__(self, kind: str, item_id: str):
        super().__init__(f"Unknown {kind} reference: {item_id}", kind=kind, item_id=item_id)
        self.kind = kind
        self.item_id = item_id


class CurrencyMismatch(PaymentError):
    code = "CURRENCY_MISMATCH"

    def __init__(self, expected: str, found: str, item_id: Optional[str] = None):
        super().__init__(
            f"Booking mixes currencies: expected {expected}, found {found}",
            expected=expected,
            found=found,
            item_id=item_id,
        )
        self.expected = expected
        self.found = found


class InvalidQuantity(PaymentError):
    code = "INVALID_QUANTITY"


class NonPositiveTotal(PaymentError):
    code = "NON_POSITIVE_TOTAL"


class AmountTooSmall(PaymentError):
    code = "AMOUNT_TOO_SMALL"


class UnsupportedCurrency(PaymentError):
    code = "UNSUPPORTED_CURRENCY"


class UnknownGateway(PaymentError):
    code = "UNKNOWN_GATEWAY"


class PaymentNotFound(PaymentError):
    code = "PAYMENT_NOT_FOUND"
    status_code = 404


class IdempotencyInProgress(PaymentError):
    """Another request holds the reservation for this idempotency key."""

    code = "IDEMPOTENCY_IN_PROGRESS"
    status_code = 409


class SignatureVerificationFailed(PaymentError):
    code = "SIGNATURE_INVALID"


class NoConfiguredGateway(PaymentError):
    """Operational misconfiguration: nothing can serve the method."""

    code = "NO_CONFIGURED_GATEWAY"
    status_code = 500


class GatewayError(PaymentError):
    code = "GATEWAY_ERROR"
    status_code = 502


class GatewayTimeout(GatewayError):
    code = "GATEWAY_TIMEOUT"
    status_code = 504
