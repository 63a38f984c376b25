from .adapter import GatewayAdapter
from .dispatcher import GatewayRouter, PAYMENT_METHODS
from .razer_adapter import RazerAdapter
from .stripe_adapter import StripeAdapter

__all__ = ["GatewayAdapter", "GatewayRouter", "PAYMENT_METHODS", "RazerAdapter", "StripeAdapter"]
