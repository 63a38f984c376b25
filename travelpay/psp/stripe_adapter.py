"""Stripe Gateway Adapter: international cards and wallets."""
from typing import Any, Dict, List, Mapping, Optional

import stripe
import structlog

from travelpay.config import settings
from travelpay.errors import GatewayError, PaymentNotFound, SignatureVerificationFailed
from travelpay.models import GatewayEvent, GatewayName, PaymentIntent, PaymentStatus
from .adapter import GatewayAdapter

logger = structlog.get_logger(__name__)

# Our method keys -> Stripe payment_method_types
STRIPE_METHOD_TYPES: Dict[str, List[str]] = {
    "card": ["card"],
    "alipay": ["alipay"],
    "wechat_pay": ["wechat_pay"],
    "grabpay_stripe": ["grabpay"],
    "fpx_stripe": ["fpx"],
}


class StripeAdapter(GatewayAdapter):
    """Stripe payment gateway adapter."""

    name = GatewayName.STRIPE
    supported_methods = tuple(STRIPE_METHOD_TYPES)
    status_map = {
        "requires_payment_method": PaymentStatus.PENDING,
        "requires_confirmation": PaymentStatus.PENDING,
        "requires_action": PaymentStatus.PENDING,
        "requires_capture": PaymentStatus.PENDING,
        "processing": PaymentStatus.PENDING,
        "succeeded": PaymentStatus.COMPLETED,
        "canceled": PaymentStatus.FAILED,
    }

    def __init__(
        self,
        api_key: Optional[str] = None,
        publishable_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(timeout=timeout)
        self.api_key = api_key or settings.STRIPE_SECRET_KEY
        self.publishable_key = publishable_key or settings.STRIPE_PUBLISHABLE_KEY
        self.webhook_secret = webhook_secret or settings.STRIPE_WEBHOOK_SECRET

    def is_configured(self) -> bool:
        return bool(self.api_key and self.publishable_key)

    async def create_payment(
        self,
        amount_minor: int,
        currency: str,
        method: str,
        metadata: Dict[str, Any],
        idempotency_key: Optional[str] = None,
    ) -> PaymentIntent:
        """Create Stripe payment intent."""
        method_types = STRIPE_METHOD_TYPES.get(method, ["card"])
        params: Dict[str, Any] = {
            "api_key": self.api_key,
            "amount": amount_minor,
            "currency": currency.lower(),
            "payment_method_types": method_types,
            # Stripe metadata values must be strings
            "metadata": {k: str(v) for k, v in metadata.items() if v is not None},
            "description": f"Travel booking - {metadata.get('destination') or 'Unknown destination'}",
        }
        if idempotency_key:
            params["idempotency_key"] = f"{idempotency_key}:{method}"

        try:
            intent = await self.run_sync(stripe.PaymentIntent.create, **params)
        except stripe.StripeError as e:
            logger.error(
                "stripe_payment_intent_failed",
                error=str(e),
                error_type=type(e).__name__,
                method=method,
            )
            raise GatewayError(f"Stripe rejected the payment: {e.user_message or e}") from e

        logger.info(
            "stripe_payment_intent_created",
            payment_intent_id=intent["id"],
            amount=amount_minor,
            currency=currency,
            method=method,
        )
        return PaymentIntent(
            id=intent["id"],
            gateway=self.name,
            status=PaymentStatus.PENDING,
            amount_minor=intent["amount"],
            currency=intent["currency"].upper(),
            method=method,
            client_secret=intent["client_secret"],
            metadata={"stripe_status": intent["status"], "payment_method_types": method_types},
        )

    async def confirm_payment(self, payment_id: str) -> PaymentIntent:
        """Retrieve Stripe payment intent and normalize its status."""
        try:
            intent = await self.run_sync(stripe.PaymentIntent.retrieve, payment_id, api_key=self.api_key)
        except stripe.InvalidRequestError as e:
            if getattr(e, "code", None) == "resource_missing":
                raise PaymentNotFound(f"Unknown Stripe payment intent: {payment_id}") from e
            raise GatewayError(f"Stripe rejected the status query: {e}") from e
        except (stripe.StripeError, GatewayError) as e:
            # Timeouts, connection errors and Stripe 5xx: the charge may still have gone through.
            logger.warning("stripe_status_inconclusive", payment_intent_id=payment_id, error=str(e))
            return self.inconclusive(payment_id, str(e))

        stripe_status = intent["status"]
        status = self.normalize_status(stripe_status)
        if stripe_status == "requires_payment_method" and intent.get("last_payment_error"):
            status = PaymentStatus.FAILED

        amount = intent.get("amount_received") or intent["amount"]
        return PaymentIntent(
            id=intent["id"],
            gateway=self.name,
            status=status,
            amount_minor=amount,
            currency=intent["currency"].upper(),
            client_secret=intent.get("client_secret"),
            metadata={"stripe_status": stripe_status, **dict(intent.get("metadata") or {})},
        )

    def verify_webhook(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """
        Verify and parse a Stripe webhook payload.

        Raises:
            SignatureVerificationFailed: missing secret, header or bad signature
        """
        if not self.webhook_secret:
            raise SignatureVerificationFailed("Stripe webhook secret not configured")
        if not signature:
            raise SignatureVerificationFailed("Missing Stripe-Signature header")
        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except (stripe.SignatureVerificationError, ValueError) as e:
            raise SignatureVerificationFailed(f"Invalid webhook signature: {e}") from e
        return {
            "event_id": event["id"],
            "type": event["type"],
            "data": event["data"]["object"],
        }

    def verify_callback(self, body: bytes, headers: Mapping[str, str]) -> GatewayEvent:
        event = self.verify_webhook(body, headers.get("stripe-signature"))
        obj = event["data"]
        if event["type"] == "payment_intent.payment_failed":
            status = PaymentStatus.FAILED
        else:
            status = self.normalize_status(obj.get("status"))
        currency = obj.get("currency")
        return GatewayEvent(
            gateway=self.name,
            payment_id=obj["id"],
            status=status,
            event_type=event["type"],
            amount_minor=obj.get("amount_received") or obj.get("amount"),
            currency=currency.upper() if currency else None,
            transaction_id=event["event_id"],
        )
