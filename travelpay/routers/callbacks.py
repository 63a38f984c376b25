"""
Inbound gateway notifications.

Signatures are verified before anything in the payload is trusted.
Mis-signed notifications, and any other notification that cannot be acted
on, are logged and acknowledged with 200 so the gateway stops retrying.
"""
import structlog
from fastapi import APIRouter, Depends, Request

from travelpay.deps import get_orchestrator
from travelpay.errors import PaymentError
from travelpay.models import GatewayName
from travelpay.services.payment_service import PaymentOrchestrator

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Payment Callbacks"])


async def _handle(gateway: GatewayName, request: Request, orchestrator: PaymentOrchestrator) -> dict:
    body = await request.body()
    try:
        event = orchestrator.handle_callback(gateway.value, body, request.headers)
    except PaymentError as e:
        logger.warning("callback_rejected", gateway=gateway.value, code=e.code, error=e.message)
        return {"status": "ignored"}
    if event is None:
        return {"status": "ignored"}
    return {"status": "ok", "paymentIntentId": event.payment_id, "paymentStatus": event.status.value}


@router.post("/payment-callback")
async def razer_callback(request: Request, orchestrator: PaymentOrchestrator = Depends(get_orchestrator)):
    return await _handle(GatewayName.RAZERPAY, request, orchestrator)


@router.post("/payment-callback/stripe")
async def stripe_callback(request: Request, orchestrator: PaymentOrchestrator = Depends(get_orchestrator)):
    return await _handle(GatewayName.STRIPE, request, orchestrator)
