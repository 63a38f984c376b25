"""
Domain types for bookings and payments.

Amounts are ``Decimal`` in major units unless the field name ends in
``_minor`` (integer smallest currency unit).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class GatewayName(str, Enum):
    """Known payment gateways."""
    STRIPE = "stripe"
    RAZERPAY = "razerpay"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class DateRange:
    start_date: str
    end_date: str


@dataclass(frozen=True)
class FlightRefs:
    outbound_id: Optional[str] = None
    return_id: Optional[str] = None


@dataclass(frozen=True)
class HotelRef:
    id: str
    nights: int


@dataclass(frozen=True)
class BookingIntent:
    """Price-free description of what the traveler is buying."""
    destination: str
    travelers: int
    date_range: DateRange
    flight_refs: FlightRefs = field(default_factory=FlightRefs)
    hotel_refs: Tuple[HotelRef, ...] = ()
    activity_refs: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ComputedTotal:
    amount: Decimal
    currency: str
    flights_subtotal: Decimal = Decimal("0")
    hotels_subtotal: Decimal = Decimal("0")
    activities_subtotal: Decimal = Decimal("0")


@dataclass(frozen=True)
class IntentRef:
    """Gateway-scoped payment intent identifier."""
    gateway: GatewayName
    intent_id: str

    def __str__(self) -> str:
        return f"{self.gateway.value}:{self.intent_id}"

    @classmethod
    def parse(cls, raw: str) -> "IntentRef":
        gateway, _, intent_id = raw.partition(":")
        return cls(GatewayName(gateway), intent_id)


@dataclass
class PaymentIntent:
    id: str
    gateway: GatewayName
    status: PaymentStatus
    amount_minor: int
    currency: str
    method: Optional[str] = None
    client_secret: Optional[str] = None
    redirect_url: Optional[str] = None
    qr_code: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    # Status could not be determined (timeout, transport error).
    inconclusive: bool = False

    @property
    def ref(self) -> IntentRef:
        return IntentRef(self.gateway, self.id)


@dataclass(frozen=True)
class GatewayEvent:
    """Signature-verified notification pushed by a gateway."""
    gateway: GatewayName
    payment_id: str
    status: PaymentStatus
    event_type: str
    amount_minor: Optional[int] = None
    currency: Optional[str] = None
    transaction_id: Optional[str] = None


@dataclass(frozen=True)
class PaymentCreationResult:
    payment_intent_id: str
    gateway: GatewayName
    computed_amount: Decimal
    currency: str
    amount_minor: int
    is_existing: bool
    client_secret: Optional[str] = None
    redirect_url: Optional[str] = None
    qr_code: Optional[str] = None


@dataclass(frozen=True)
class BookingConfirmation:
    id: str
    payment_intent_id: str
    gateway: GatewayName
    destination: str
    travelers: int
    start_date: str
    end_date: str
    total_amount: Decimal
    amount_minor: int
    currency: str
    flight_total: Decimal
    hotel_total: Decimal
    activity_total: Decimal
    status: str = "confirmed"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class ConfirmationResult:
    success: bool
    status: PaymentStatus
    booking: Optional[BookingConfirmation] = None
    code: Optional[str] = None
    message: Optional[str] = None
    inconclusive: bool = False


@dataclass(frozen=True)
class PaymentMethodInfo:
    method: str
    gateway: GatewayName
    name: str
    category: str
