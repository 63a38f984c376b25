"""
Razer Merchant Services adapter: Malaysian online banking, e-wallets and QR.

Bank and wallet methods are settled through a signed redirect; QR methods
return a scan-to-pay payload. Status queries, their responses and inbound
callbacks are all signed, and anything whose signature does not verify is
rejected regardless of the status it claims.
"""
from __future__ import annotations

import hashlib
import hmac
import secrets
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlencode

import httpx
import structlog

from travelpay.config import settings
from travelpay.errors import GatewayError, SignatureVerificationFailed
from travelpay.models import GatewayEvent, GatewayName, PaymentIntent, PaymentStatus
from .adapter import GatewayAdapter

logger = structlog.get_logger(__name__)

# Our method keys -> aggregator channel codes
RAZER_CHANNELS: Dict[str, str] = {
    "fpx": "fpx",
    "tngd": "tngd",
    "boost": "boost",
    "grabpay": "grabpay",
    "shopeepay": "shopeepay",
    "maybank_qr": "maybank2u",
    "duitnow_qr": "duitnow",
    "bigpay": "bigpay",
    "vcash": "vcash",
    "razer_pay": "razerpay",
}

PRODUCTION_BASE = "https://pay.razer.com"
SANDBOX_BASE = "https://sandbox-pay.razer.com"
QR_EXPIRY = timedelta(minutes=15)


class RazerSigner:
    """Keyed hash over concatenated fields; the digest algorithm is configuration."""

    def __init__(self, key: str, algorithm: str = "md5"):
        self.key = key
        self.algorithm = algorithm

    def sign(self, *parts: Any) -> str:
        message = "".join(str(p) for p in parts).encode()
        return hmac.new(self.key.encode(), message, self.algorithm).hexdigest()

    def verify(self, signature: Optional[str], *parts: Any) -> bool:
        if not signature:
            return False
        return hmac.compare_digest(self.sign(*parts), signature.lower())


def parse_status_response(text: str) -> Dict[str, str]:
    """Parse the ``Key: Value`` line format of status query responses."""
    result: Dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.partition(":")
        if sep:
            result[key.strip()] = value.strip()
    return result


class RazerAdapter(GatewayAdapter):
    """Razer redirect/QR payment gateway adapter."""

    name = GatewayName.RAZERPAY
    supported_methods = tuple(RAZER_CHANNELS)
    # Aggregator status codes
    status_map = {
        "00": PaymentStatus.COMPLETED,
        "11": PaymentStatus.FAILED,
        "22": PaymentStatus.PENDING,
    }

    def __init__(
        self,
        merchant_id: Optional[str] = None,
        verify_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        sandbox: Optional[bool] = None,
        algorithm: Optional[str] = None,
        app_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout)
        self.merchant_id = merchant_id or settings.RAZER_MERCHANT_ID
        self.verify_key = verify_key or settings.RAZER_VERIFY_KEY
        self.secret_key = secret_key or settings.RAZER_SECRET_KEY or self.verify_key
        self.sandbox = settings.RAZER_SANDBOX if sandbox is None else sandbox
        self.algorithm = algorithm or settings.RAZER_SIGNATURE_ALGORITHM
        self.app_url = (app_url or settings.APP_URL).rstrip("/")
        self._base = SANDBOX_BASE if self.sandbox else PRODUCTION_BASE
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.merchant_id and self.verify_key)

    @property
    def request_signer(self) -> RazerSigner:
        return RazerSigner(self.verify_key or "", self.algorithm)

    @property
    def response_signer(self) -> RazerSigner:
        return RazerSigner(self.secret_key or "", self.algorithm)

    @staticmethod
    def new_order_id() -> str:
        return f"ORDER_{int(time.time() * 1000)}_{secrets.token_hex(5)}"

    @staticmethod
    def is_qr_method(method: str) -> bool:
        return method.endswith("_qr")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self._base, timeout=self.timeout, transport=self._transport)

    async def _post_form(self, path: str, data: Dict[str, str]) -> httpx.Response:
        async with self._client() as client:
            r = await client.post(path, data=data)
            r.raise_for_status()
            return r

    def _payment_fields(
        self, order_id: str, amount_minor: int, currency: str, method: str, metadata: Dict[str, Any]
    ) -> Dict[str, str]:
        return {
            "merchant_id": self.merchant_id,
            "orderid": order_id,
            "amount": str(amount_minor),
            "currency": currency,
            "channel": RAZER_CHANNELS[method],
            "vcode": self.request_signer.sign(self.merchant_id, order_id, amount_minor, currency),
            "return_url": f"{self.app_url}/payment/success",
            "callback_url": f"{self.app_url}/payment-callback",
            "cancel_url": f"{self.app_url}/payment/cancel",
            "bill_name": str(metadata.get("customer_name") or "Travel Booking"),
            "bill_desc": f"Travel booking to {metadata.get('destination') or 'destination'}",
            "country": "MY",
        }

    async def create_payment(
        self,
        amount_minor: int,
        currency: str,
        method: str,
        metadata: Dict[str, Any],
        idempotency_key: Optional[str] = None,
    ) -> PaymentIntent:
        """Create a redirect or QR payment with the aggregator."""
        if method not in RAZER_CHANNELS:
            raise GatewayError(f"Razer does not support payment method: {method}")

        order_id = self.new_order_id()
        fields = self._payment_fields(order_id, amount_minor, currency, method, metadata)
        intent = PaymentIntent(
            id=order_id,
            gateway=self.name,
            status=PaymentStatus.PENDING,
            amount_minor=amount_minor,
            currency=currency,
            method=method,
            metadata={"razer_order_id": order_id, "channel": fields["channel"], **metadata},
        )

        if self.is_qr_method(method):
            try:
                r = await self.with_timeout(lambda: self._post_form("/RMS/qr_pay.php", fields))
                qr_code = r.json().get("qr_code_url")
            except (httpx.HTTPError, ValueError) as e:
                logger.error("razer_qr_request_failed", order_id=order_id, error=str(e))
                raise GatewayError(f"Razer QR request failed: {e}") from e
            if not qr_code:
                raise GatewayError("Razer QR response did not include a QR payload")
            intent.qr_code = qr_code
            intent.metadata["qr_expiry_time"] = (datetime.now(timezone.utc) + QR_EXPIRY).isoformat()
        else:
            intent.redirect_url = f"{self._base}/RMS/pay/{self.merchant_id}?{urlencode(fields)}"
            intent.metadata["redirect_required"] = True

        logger.info(
            "razer_payment_created",
            order_id=order_id,
            amount=amount_minor,
            currency=currency,
            method=method,
            qr=self.is_qr_method(method),
        )
        return intent

    async def confirm_payment(self, payment_id: str) -> PaymentIntent:
        """Signed status query; the response signature is verified before use."""
        query = {
            "merchant_id": self.merchant_id,
            "orderid": payment_id,
            "skey": self.request_signer.sign(self.merchant_id, payment_id),
        }
        try:
            r = await self.with_timeout(lambda: self._post_form("/RMS/query_status.php", query))
        except (httpx.HTTPError, GatewayError) as e:
            logger.warning("razer_status_inconclusive", order_id=payment_id, error=str(e))
            return self.inconclusive(payment_id, str(e))

        fields = parse_status_response(r.text)
        stat_code = fields.get("StatCode", "")
        amount = fields.get("Amount", "")
        currency = fields.get("Currency", "")
        if not self.response_signer.verify(
            fields.get("VrfKey"), self.merchant_id, payment_id, stat_code, amount, currency
        ):
            logger.critical("razer_status_signature_invalid", order_id=payment_id, claimed_status=stat_code)
            raise SignatureVerificationFailed(
                "Razer status response failed signature verification", order_id=payment_id
            )

        try:
            amount_minor = int(amount)
        except ValueError as e:
            raise GatewayError(f"Razer reported an unreadable amount: {amount!r}") from e

        return PaymentIntent(
            id=payment_id,
            gateway=self.name,
            status=self.normalize_status(stat_code),
            amount_minor=amount_minor,
            currency=currency.upper(),
            metadata={
                "razer_status": stat_code,
                "razer_message": fields.get("StatName"),
                "transaction_id": fields.get("TranID"),
            },
        )

    def verify_callback(self, body: bytes, headers: Mapping[str, str]) -> GatewayEvent:
        """Verify a form-encoded payment notification."""
        fields = dict(parse_qsl(body.decode(errors="replace"), keep_blank_values=True))
        order_id = fields.get("orderid", "")
        status = fields.get("status", "")
        amount = fields.get("amount", "")
        currency = fields.get("currency", "")

        if not order_id:
            raise SignatureVerificationFailed("Callback is missing orderid")
        if fields.get("merchant_id") and fields["merchant_id"] != self.merchant_id:
            raise SignatureVerificationFailed("Callback is for another merchant", order_id=order_id)
        if not self.response_signer.verify(fields.get("skey"), self.merchant_id, order_id, status, amount, currency):
            raise SignatureVerificationFailed("Callback failed signature verification", order_id=order_id)

        try:
            amount_minor = int(amount) if amount else None
        except ValueError:
            amount_minor = None
        return GatewayEvent(
            gateway=self.name,
            payment_id=order_id,
            status=self.normalize_status(status),
            event_type="razer.callback",
            amount_minor=amount_minor,
            currency=currency.upper() or None,
            transaction_id=fields.get("tranID"),
        )
