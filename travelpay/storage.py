"""
In-memory stores for payment intents and booking confirmations.

Nothing here survives a restart; the gateway remains the system of record
for what was charged.
"""
from typing import Dict, Optional

from travelpay.models import BookingConfirmation, IntentRef, PaymentIntent, PaymentStatus

TERMINAL_STATUSES = frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED})


class PaymentIntentStore:
    """Intents keyed by (gateway, id): raw ids may collide across gateways."""

    def __init__(self):
        self._intents: Dict[IntentRef, PaymentIntent] = {}

    def save(self, intent: PaymentIntent) -> PaymentIntent:
        self._intents[intent.ref] = intent
        return intent

    def get(self, ref: IntentRef) -> Optional[PaymentIntent]:
        return self._intents.get(ref)

    def update_status(self, ref: IntentRef, status: PaymentStatus) -> Optional[PaymentIntent]:
        """Record a new status; a settled intent never moves back to pending."""
        intent = self._intents.get(ref)
        if intent is None:
            return None
        if intent.status in TERMINAL_STATUSES and status == PaymentStatus.PENDING:
            return intent
        intent.status = status
        return intent


class BookingStore:
    def __init__(self):
        self._bookings: Dict[IntentRef, BookingConfirmation] = {}

    def save(self, ref: IntentRef, booking: BookingConfirmation) -> BookingConfirmation:
        self._bookings[ref] = booking
        return booking

    def get(self, ref: IntentRef) -> Optional[BookingConfirmation]:
        return self._bookings.get(ref)
