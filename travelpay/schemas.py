"""
Request/response schemas for the payment API (camelCase on the wire).
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from travelpay.models import BookingConfirmation, ConfirmationResult, PaymentCreationResult, PaymentMethodInfo


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreatePaymentIntentRequest(CamelModel):
    booking_details: Dict[str, Any]
    idempotency_key: str = Field(..., min_length=1, max_length=255)
    payment_method: str = Field(default="card", min_length=1, max_length=64)


class CreatePaymentIntentResponse(CamelModel):
    payment_intent_id: str
    gateway_name: str
    client_secret: Optional[str] = None
    redirect_url: Optional[str] = None
    qr_code: Optional[str] = None
    calculated_amount: Decimal
    amount_in_smallest_unit: int
    currency: str
    is_existing: bool

    @classmethod
    def from_result(cls, result: PaymentCreationResult) -> "CreatePaymentIntentResponse":
        return cls(
            payment_intent_id=result.payment_intent_id,
            gateway_name=result.gateway.value,
            client_secret=result.client_secret,
            redirect_url=result.redirect_url,
            qr_code=result.qr_code,
            calculated_amount=result.computed_amount,
            amount_in_smallest_unit=result.amount_minor,
            currency=result.currency,
            is_existing=result.is_existing,
        )


class ConfirmPaymentRequest(CamelModel):
    payment_intent_id: str = Field(..., min_length=1)
    gateway_name: str = Field(default="stripe", min_length=1)
    booking_details: Dict[str, Any]


class BookingOut(CamelModel):
    id: str
    payment_intent_id: str
    gateway_name: str
    destination: str
    travelers: int
    start_date: str
    end_date: str
    total_amount: Decimal
    amount_in_smallest_unit: int
    currency: str
    status: str
    created_at: datetime
    flight_details: Dict[str, Decimal]
    hotel_details: Dict[str, Decimal]
    activity_details: Dict[str, Decimal]

    @classmethod
    def from_booking(cls, booking: BookingConfirmation) -> "BookingOut":
        return cls(
            id=booking.id,
            payment_intent_id=booking.payment_intent_id,
            gateway_name=booking.gateway.value,
            destination=booking.destination,
            travelers=booking.travelers,
            start_date=booking.start_date,
            end_date=booking.end_date,
            total_amount=booking.total_amount,
            amount_in_smallest_unit=booking.amount_minor,
            currency=booking.currency,
            status=booking.status,
            created_at=booking.created_at,
            flight_details={"total": booking.flight_total},
            hotel_details={"total": booking.hotel_total},
            activity_details={"total": booking.activity_total},
        )


class ConfirmPaymentResponse(CamelModel):
    success: bool
    status: str
    booking: Optional[BookingOut] = None
    code: Optional[str] = None
    message: Optional[str] = None
    inconclusive: bool = False

    @classmethod
    def from_result(cls, result: ConfirmationResult) -> "ConfirmPaymentResponse":
        return cls(
            success=result.success,
            status=result.status.value,
            booking=BookingOut.from_booking(result.booking) if result.booking else None,
            code=result.code,
            message=result.message,
            inconclusive=result.inconclusive,
        )


class PaymentMethodOut(CamelModel):
    method: str
    gateway: str
    name: str
    category: str

    @classmethod
    def from_info(cls, info: PaymentMethodInfo) -> "PaymentMethodOut":
        return cls(method=info.method, gateway=info.gateway.value, name=info.name, category=info.category)
