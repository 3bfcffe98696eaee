"""Signing key cache - issuer JWKS fetched over HTTP and swapped atomically."""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import jwt
from loguru import logger

from grantgate.application.dto.trust import KeySetSnapshot
from grantgate.domain.exceptions import KeySetUnavailable

KeySetFetcher = Callable[[], Awaitable[tuple[dict[str, Any], str]]]

DISCOVERY_PATH = "/.well-known/openid-configuration"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class HttpKeySetFetcher:
    """Fetches the JWKS document through OIDC discovery, or from an explicit URL."""

    def __init__(
        self,
        authority: str,
        jwks_url: str = "",
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._authority = authority.rstrip("/")
        self._jwks_url = jwks_url
        self._timeout = timeout
        self._transport = transport

    async def __call__(self) -> tuple[dict[str, Any], str]:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            issuer = self._authority
            jwks_uri = self._jwks_url
            if not jwks_uri:
                r = await client.get(f"{self._authority}{DISCOVERY_PATH}")
                r.raise_for_status()
                discovery = r.json()
                jwks_uri = discovery["jwks_uri"]
                issuer = discovery.get("issuer") or issuer
            r = await client.get(jwks_uri)
            r.raise_for_status()
            return r.json(), issuer


class SigningKeyCache:
    """Process-wide cache of the issuer's signing keys.

    Readers get an immutable snapshot; a refresh builds a new snapshot and
    replaces the reference under a lock, so in-flight verifications keep the
    keys they started with. A forced refresh for a kid missing from the
    current set always fetches; other forced refreshes closer together than
    ``min_refresh_interval`` reuse the current snapshot.
    """

    def __init__(
        self,
        fetcher: KeySetFetcher,
        lifetime: timedelta = timedelta(minutes=60),
        min_refresh_interval: timedelta = timedelta(seconds=30),
        retries: int = 1,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._fetcher = fetcher
        self._lifetime = lifetime
        self._min_refresh_interval = min_refresh_interval
        self._retries = retries
        self._clock = clock
        self._snapshot: KeySetSnapshot | None = None
        self._lock = asyncio.Lock()

    @property
    def snapshot(self) -> KeySetSnapshot | None:
        return self._snapshot

    async def get(self) -> KeySetSnapshot:
        snapshot = self._snapshot
        if snapshot is not None and self._clock() - snapshot.fetched_at < self._lifetime:
            return snapshot
        return await self.refresh()

    async def refresh(self, force: bool = False, kid: str | None = None) -> KeySetSnapshot:
        seen = self._snapshot
        async with self._lock:
            current = self._snapshot
            if current is not None and current is not seen:
                return current
            now = self._clock()
            if current is not None:
                age = now - current.fetched_at
                if (
                    force
                    and age < self._min_refresh_interval
                    and current.find(kid) is not None
                ):
                    logger.debug("Forced key refresh throttled, reusing current keys")
                    return current
                if not force and age < self._lifetime:
                    return current
            self._snapshot = await self._fetch(now)
            return self._snapshot

    async def _fetch(self, now: datetime) -> KeySetSnapshot:
        last_error: Exception | None = None
        for attempt in range(self._retries + 1):
            try:
                document, issuer = await self._fetcher()
                keys = jwt.PyJWKSet.from_dict(document)
            except (httpx.HTTPError, jwt.PyJWTError, ValueError, KeyError, TypeError) as e:
                last_error = e
                logger.warning(f"Signing key fetch attempt {attempt + 1} failed: {e!r}")
                continue
            logger.debug(f"Loaded {len(keys.keys)} signing key(s) for issuer {issuer}")
            return KeySetSnapshot(keys=keys, issuer=issuer, fetched_at=now)
        raise KeySetUnavailable("Could not fetch signing keys from issuer") from last_error
