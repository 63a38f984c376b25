from typing import Optional

from fastapi import Request

from travelpay.catalog import InMemoryCatalogStore, build_sample_catalog
from travelpay.config.settings import Settings
from travelpay.psp import GatewayRouter, RazerAdapter, StripeAdapter
from travelpay.services.idempotency import IdempotencyLedger, InMemoryIdempotencyLedger, RedisIdempotencyLedger
from travelpay.services.payment_service import PaymentOrchestrator
from travelpay.services.pricing_service import PriceCalculator


def build_router(settings: Settings) -> GatewayRouter:
    router = GatewayRouter()
    router.register(StripeAdapter(timeout=settings.GATEWAY_TIMEOUT_SECONDS))
    router.register(RazerAdapter(timeout=settings.GATEWAY_TIMEOUT_SECONDS))
    return router


def build_ledger(settings: Settings) -> IdempotencyLedger:
    if settings.IDEMPOTENCY_BACKEND == "redis":
        return RedisIdempotencyLedger.from_url(settings.REDIS_URL, ttl_seconds=settings.IDEMPOTENCY_TTL_SECONDS)
    return InMemoryIdempotencyLedger()


def build_orchestrator(
    settings: Settings,
    catalog: Optional[InMemoryCatalogStore] = None,
) -> PaymentOrchestrator:
    catalog = catalog or build_sample_catalog()
    return PaymentOrchestrator(
        calculator=PriceCalculator(catalog, settings.MAX_TRAVELERS, settings.MAX_NIGHTS),
        router=build_router(settings),
        ledger=build_ledger(settings),
    )


def get_orchestrator(request: Request) -> PaymentOrchestrator:
    return request.app.state.orchestrator


def get_catalog(request: Request) -> InMemoryCatalogStore:
    return request.app.state.orchestrator.calculator.catalog
