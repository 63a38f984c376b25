"""
Gateway Adapter Base Class and Interface.
Provides uniform interface for the payment gateways (Stripe, Razer, etc.).
"""
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, TypeVar

import anyio
import anyio.to_thread

from travelpay.config import settings
from travelpay.errors import GatewayTimeout
from travelpay.models import GatewayEvent, GatewayName, PaymentIntent, PaymentStatus

T = TypeVar("T")


class GatewayAdapter(ABC):
    """
    Base adapter for payment gateways.
    All gateway implementations must inherit from this class.
    """

    name: GatewayName
    supported_methods: Tuple[str, ...] = ()
    # Provider status vocabulary -> three-state model. Unknown -> pending.
    status_map: Dict[str, PaymentStatus] = {}

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Bound for every outbound gateway call, in seconds
        """
        self.timeout = timeout or settings.GATEWAY_TIMEOUT_SECONDS

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the credentials this gateway needs are present."""

    def supports(self, method: str) -> bool:
        return method in self.supported_methods

    @abstractmethod
    async def create_payment(
        self,
        amount_minor: int,
        currency: str,
        method: str,
        metadata: Dict[str, Any],
        idempotency_key: Optional[str] = None,
    ) -> PaymentIntent:
        """
        Create a provider-side payment.

        Args:
            amount_minor: Amount in smallest currency unit (e.g., sen, cents)
            currency: ISO currency code (e.g., "MYR")
            method: Payment method key (e.g., "card", "fpx", "duitnow_qr")
            metadata: Audit data describing what is being charged for
            idempotency_key: Forwarded to providers that support it

        Returns:
            PaymentIntent in pending state carrying a client secret,
            redirect URL or QR payload

        Raises:
            GatewayTimeout: the provider did not answer in time
            GatewayError: the provider rejected or failed the call
        """

    @abstractmethod
    async def confirm_payment(self, payment_id: str) -> PaymentIntent:
        """
        Refresh the settlement status of a payment.

        Transport failures and timeouts yield a pending, inconclusive
        intent: the provider side may have succeeded.

        Args:
            payment_id: Gateway-scoped payment identifier

        Returns:
            PaymentIntent with normalized status and the charged amount
        """

    @abstractmethod
    def verify_callback(self, body: bytes, headers: Mapping[str, str]) -> GatewayEvent:
        """
        Verify and parse an inbound gateway notification.

        Raises:
            SignatureVerificationFailed: unsigned or mis-signed payload
        """

    def normalize_status(self, provider_status: Optional[str]) -> PaymentStatus:
        """
        Normalize provider-specific status to the three-state model.

        Args:
            provider_status: Status from the gateway

        Returns:
            One of: pending, completed, failed
        """
        if not provider_status:
            return PaymentStatus.PENDING
        return self.status_map.get(provider_status.lower(), PaymentStatus.PENDING)

    def inconclusive(self, payment_id: str, reason: str) -> PaymentIntent:
        """Status placeholder used when the gateway could not be reached."""
        return PaymentIntent(
            id=payment_id,
            gateway=self.name,
            status=PaymentStatus.PENDING,
            amount_minor=0,
            currency="",
            metadata={"reason": reason},
            inconclusive=True,
        )

    async def run_sync(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a blocking SDK call in a worker thread, bounded by the timeout."""
        try:
            with anyio.fail_after(self.timeout):
                return await anyio.to_thread.run_sync(
                    lambda: func(*args, **kwargs), abandon_on_cancel=True
                )
        except TimeoutError as e:
            raise GatewayTimeout(f"{self.name.value} did not answer within {self.timeout}s") from e

    async def with_timeout(self, coro: Callable[[], Awaitable[T]]) -> T:
        try:
            with anyio.fail_after(self.timeout):
                return await coro()
        except TimeoutError as e:
            raise GatewayTimeout(f"{self.name.value} did not answer within {self.timeout}s") from e

    def __repr__(self):
        return f"<{self.__class__.__name__}(gateway={self.name.value}, configured={self.is_configured()})>"
