"""Lifespan middleware - opens the pool on startup, closes it on shutdown."""

from typing import Any

from loguru import logger
from psycopg_pool import AsyncConnectionPool

from grantgate.application.ports import SigningKeyProvider
from grantgate.domain.exceptions import KeySetUnavailable


class PoolLifespanMiddleware:
    """Opens the connection pool and warms the signing key cache at startup."""

    def __init__(
        self, pool: AsyncConnectionPool, key_provider: SigningKeyProvider | None = None
    ) -> None:
        self._pool = pool
        self._keys = key_provider

    async def process_startup(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        await self._pool.open()
        logger.info("Database pool opened")
        if self._keys is None:
            return
        try:
            await self._keys.get()
        except KeySetUnavailable:
            logger.warning("Signing keys not available at startup, will fetch on first use")

    async def process_shutdown(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        await self._pool.close()
        logger.info("Database pool closed")
