"""Gateway Router - Routes a payment method to the gateway that owns it."""
from typing import Dict, List, Optional

import structlog

from travelpay.errors import NoConfiguredGateway, UnknownGateway
from travelpay.models import GatewayName, PaymentMethodInfo
from .adapter import GatewayAdapter

logger = structlog.get_logger(__name__)

# Display name and category per method key
PAYMENT_METHODS: Dict[str, Dict[str, str]] = {
    # Stripe
    "card": {"name": "Credit/Debit Card", "category": "card"},
    "alipay": {"name": "Alipay", "category": "wallet"},
    "wechat_pay": {"name": "WeChat Pay", "category": "wallet"},
    "grabpay_stripe": {"name": "GrabPay (International)", "category": "wallet"},
    "fpx_stripe": {"name": "FPX via Stripe", "category": "banking"},
    # Razer (Malaysia)
    "fpx": {"name": "Online Banking (FPX)", "category": "banking"},
    "tngd": {"name": "Touch 'n Go eWallet", "category": "wallet"},
    "boost": {"name": "Boost", "category": "wallet"},
    "grabpay": {"name": "GrabPay", "category": "wallet"},
    "shopeepay": {"name": "ShopeePay", "category": "wallet"},
    "maybank_qr": {"name": "Maybank QR", "category": "qr"},
    "duitnow_qr": {"name": "DuitNow QR", "category": "qr"},
    "bigpay": {"name": "BigPay", "category": "wallet"},
    "vcash": {"name": "vcash", "category": "wallet"},
    "razer_pay": {"name": "Razer Pay", "category": "wallet"},
}

# Method every default gateway must accept to act as a fallback
BASELINE_METHOD = "card"


class GatewayRouter:
    """
    Registry of gateway adapters, populated at startup.

    Resolution never falls through from a method's owning gateway to an
    unrelated one: only the designated default gateway may serve methods
    nobody owns, through its baseline method.
    """

    def __init__(self, default: GatewayName = GatewayName.STRIPE):
        self.default = default
        self._adapters: Dict[GatewayName, GatewayAdapter] = {}

    def register(self, adapter: GatewayAdapter) -> GatewayAdapter:
        self._adapters[adapter.name] = adapter
        logger.info(
            "gateway_registered",
            gateway=adapter.name.value,
            configured=adapter.is_configured(),
            methods=list(adapter.supported_methods),
        )
        return adapter

    def get(self, name: str) -> GatewayAdapter:
        """
        Get a registered adapter by gateway name.

        Raises:
            UnknownGateway: name is not a known or registered gateway
        """
        try:
            gateway = GatewayName(str(name).lower())
        except ValueError:
            raise UnknownGateway(f"Unknown gateway: {name}")
        adapter = self._adapters.get(gateway)
        if adapter is None:
            raise UnknownGateway(f"Gateway not registered: {name}")
        return adapter

    def owner_of(self, method: str) -> Optional[GatewayAdapter]:
        for adapter in self._adapters.values():
            if adapter.supports(method):
                return adapter
        return None

    def select_gateway(self, method: str) -> GatewayAdapter:
        """
        Pick the adapter that serves ``method``.

        Raises:
            NoConfiguredGateway: no adapter both supports the method and is configured
        """
        owner = self.owner_of(method)
        if owner is not None:
            if owner.is_configured():
                return owner
            # An owned method never falls back to another gateway.
            logger.error("gateway_not_configured", method=method, gateway=owner.name.value)
            raise NoConfiguredGateway(
                f"No configured gateway found for payment method: {method}",
                method=method,
                gateway=owner.name.value,
            )

        default = self._adapters.get(self.default)
        if default is not None and default.supports(BASELINE_METHOD) and default.is_configured():
            logger.info("gateway_default_fallback", method=method, gateway=default.name.value)
            return default

        logger.error("gateway_not_found", method=method)
        raise NoConfiguredGateway(f"No configured gateway found for payment method: {method}", method=method)

    def available_methods(self) -> List[PaymentMethodInfo]:
        """Methods whose owning gateway is configured right now."""
        methods = []
        for adapter in self._adapters.values():
            if not adapter.is_configured():
                continue
            for method in adapter.supported_methods:
                info = PAYMENT_METHODS.get(method)
                if info is None:
                    continue
                methods.append(
                    PaymentMethodInfo(method=method, gateway=adapter.name, name=info["name"], category=info["category"])
                )
        return methods
