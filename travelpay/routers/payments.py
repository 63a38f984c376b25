"""
Payment endpoints used by the checkout wizard.

Amounts are never taken from the client: the booking details carry ids and
quantities only and the server prices them from the catalog.
"""
from typing import List

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from travelpay.deps import get_orchestrator
from travelpay.schemas import (
    ConfirmPaymentRequest,
    ConfirmPaymentResponse,
    CreatePaymentIntentRequest,
    CreatePaymentIntentResponse,
    PaymentMethodOut,
)
from travelpay.services.normalize import normalize_booking_details
from travelpay.services.payment_service import AMOUNT_MISMATCH, CURRENCY_MISMATCH, PaymentOrchestrator

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Payments"])


@router.post("/payment-intent", response_model=CreatePaymentIntentResponse)
async def create_payment_intent(
    body: CreatePaymentIntentRequest,
    orchestrator: PaymentOrchestrator = Depends(get_orchestrator),
):
    intent = normalize_booking_details(body.booking_details)
    result = await orchestrator.create_payment(intent, body.payment_method, body.idempotency_key)
    return CreatePaymentIntentResponse.from_result(result)


@router.post("/confirm-payment", response_model=ConfirmPaymentResponse)
async def confirm_payment(
    body: ConfirmPaymentRequest,
    orchestrator: PaymentOrchestrator = Depends(get_orchestrator),
):
    intent = normalize_booking_details(body.booking_details)
    result = await orchestrator.confirm_payment(body.payment_intent_id, body.gateway_name, intent)
    response = ConfirmPaymentResponse.from_result(result)
    if result.code in (AMOUNT_MISMATCH, CURRENCY_MISMATCH):
        return JSONResponse(status_code=409, content=response.model_dump(mode="json", by_alias=True))
    if result.code is not None:
        return JSONResponse(status_code=502, content=response.model_dump(mode="json", by_alias=True))
    return response


@router.get("/payment-methods", response_model=List[PaymentMethodOut])
async def list_payment_methods(orchestrator: PaymentOrchestrator = Depends(get_orchestrator)):
    return [PaymentMethodOut.from_info(info) for info in orchestrator.available_methods()]
