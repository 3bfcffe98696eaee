"""Revocation registry - durable, idempotent record of revoked token ids."""

from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime, timedelta

from loguru import logger

from grantgate.domain.entities import RevokedToken, compute_jti_hash
from grantgate.domain.exceptions import InvalidRequest
from grantgate.domain.value_objects import RevocationOutcome


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RevocationRegistry:
    """Revoked token ids backed by storage with a unique jti.

    ``is_revoked`` reads storage on every call so a revocation is visible to the
    next reader. There is no un-revoke; rows only leave through cleanup once the
    token would be expired anyway.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        cleanup_margin: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._cleanup_margin = cleanup_margin
        self._clock = clock

    async def revoke(self, entry: RevokedToken) -> RevocationOutcome:
        """Record a revocation; a second call for the same jti is a no-op."""
        jti = (entry.jti or "").strip()
        if not jti:
            raise InvalidRequest("jti is required")
        token = replace(
            entry,
            jti=jti,
            jti_hash=compute_jti_hash(jti),
            revoked_at=entry.revoked_at or self._clock(),
        )
        async with self._uow_factory() as uow:
            inserted = await uow.revoked_tokens.insert_if_absent(token)
        if not inserted:
            logger.debug(f"Token {token.jti_hash[:12]} already revoked")
            return RevocationOutcome.ALREADY_REVOKED
        logger.info(
            f"Revoked token {token.jti_hash[:12]} of client {token.client_id}"
            f" subject {token.subject_id}"
        )
        return RevocationOutcome.INSERTED

    async def is_revoked(self, jti: str | None) -> bool:
        if not jti or not jti.strip():
            return False
        async with self._uow_factory() as uow:
            return await uow.revoked_tokens.exists(jti.strip())

    async def get(self, jti: str) -> RevokedToken | None:
        async with self._uow_factory() as uow:
            return await uow.revoked_tokens.get(jti)

    async def list_revoked(
        self,
        page: int = 1,
        page_size: int = 20,
        subject_id: str | None = None,
        client_id: str | None = None,
    ) -> tuple[list[RevokedToken], int]:
        """One page of revocations, newest first, and the total count."""
        page = max(page, 1)
        page_size = min(max(page_size, 1), 100)
        async with self._uow_factory() as uow:
            return await uow.revoked_tokens.list_page(
                offset=(page - 1) * page_size,
                limit=page_size,
                subject_id=subject_id,
                client_id=client_id,
            )

    async def cleanup_expired(self, now: datetime | None = None) -> int:
        """Delete revocations whose token expired more than the margin ago."""
        cutoff = (now or self._clock()) - self._cleanup_margin
        async with self._uow_factory() as uow:
            deleted = await uow.revoked_tokens.delete_expired_before(cutoff)
        if deleted:
            logger.info(f"Removed {deleted} expired revocation(s) older than {cutoff.isoformat()}")
        return deleted
