"""
Idempotency ledger: one payment intent per (idempotency key, method).

``check_or_reserve`` must be atomic relative to concurrent calls bearing the
same key. The in-memory ledger gets this by never suspending between the
check and the reservation write; the Redis ledger uses ``SET NX`` so the
guarantee holds across processes.
"""
from typing import Dict, Optional, Protocol, Tuple

import redis.asyncio as redis
import structlog

from travelpay.errors import IdempotencyInProgress
from travelpay.models import IntentRef

logger = structlog.get_logger(__name__)

PENDING = "__pending__"


class IdempotencyLedger(Protocol):
    async def check_or_reserve(self, key: str, method: str) -> Optional[IntentRef]:
        ...

    async def record(self, key: str, method: str, ref: IntentRef) -> None:
        ...

    async def release(self, key: str, method: str) -> None:
        ...


class InMemoryIdempotencyLedger:
    """Process-local ledger. Entries live for the process lifetime."""

    def __init__(self):
        self._entries: Dict[Tuple[str, str], str] = {}

    async def check_or_reserve(self, key: str, method: str) -> Optional[IntentRef]:
        # No await between the lookup and the write below.
        existing = self._entries.get((key, method))
        if existing is None:
            self._entries[(key, method)] = PENDING
            return None
        if existing == PENDING:
            raise IdempotencyInProgress(
                "A payment for this idempotency key is already being created",
                idempotency_key=key,
            )
        return IntentRef.parse(existing)

    async def record(self, key: str, method: str, ref: IntentRef) -> None:
        self._entries[(key, method)] = str(ref)

    async def release(self, key: str, method: str) -> None:
        if self._entries.get((key, method)) == PENDING:
            del self._entries[(key, method)]


class RedisIdempotencyLedger:
    """Ledger shared by every server process through Redis."""

    def __init__(self, client: redis.Redis, ttl_seconds: Optional[int] = None, prefix: str = "idempotency"):
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, ttl_seconds: Optional[int] = None) -> "RedisIdempotencyLedger":
        client = redis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        return cls(client, ttl_seconds=ttl_seconds)

    def _key(self, key: str, method: str) -> str:
        return f"{self.prefix}:{method}:{key}"

    async def check_or_reserve(self, key: str, method: str) -> Optional[IntentRef]:
        redis_key = self._key(key, method)
        reserved = await self.client.set(redis_key, PENDING, nx=True, ex=self.ttl_seconds)
        if reserved:
            return None
        existing = await self.client.get(redis_key)
        if existing is None:
            # Reservation expired or was released between SET and GET.
            return await self.check_or_reserve(key, method)
        if existing == PENDING:
            raise IdempotencyInProgress(
                "A payment for this idempotency key is already being created",
                idempotency_key=key,
            )
        return IntentRef.parse(existing)

    async def record(self, key: str, method: str, ref: IntentRef) -> None:
        await self.client.set(self._key(key, method), str(ref), ex=self.ttl_seconds)

    async def release(self, key: str, method: str) -> None:
        redis_key = self._key(key, method)
        if await self.client.get(redis_key) == PENDING:
            await self.client.delete(redis_key)
            logger.info("idempotency_reservation_released", method=method)

    async def close(self) -> None:
        await self.client.aclose()
