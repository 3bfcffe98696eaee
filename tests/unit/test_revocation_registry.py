"""Unit tests for RevocationRegistry."""

from datetime import timedelta

import pytest

from grantgate.application.use_cases.token.revocation_registry import RevocationRegistry
from grantgate.domain.entities import RevokedToken, compute_jti_hash
from grantgate.domain.exceptions import InvalidRequest
from grantgate.domain.value_objects import RevocationOutcome

from tests.conftest import CLIENT_ID, T0


@pytest.fixture
def registry(uow_factory) -> RevocationRegistry:
    return RevocationRegistry(uow_factory, clock=lambda: T0)


def _token(jti: str, **kwargs) -> RevokedToken:
    return RevokedToken(jti=jti, client_id=CLIENT_ID, **kwargs)


@pytest.mark.asyncio
async def test_revoke_is_idempotent(registry) -> None:
    assert await registry.revoke(_token("abc123")) == RevocationOutcome.INSERTED
    assert await registry.revoke(_token("abc123")) == RevocationOutcome.ALREADY_REVOKED
    assert await registry.is_revoked("abc123")


@pytest.mark.asyncio
async def test_revoke_fills_hash_and_timestamp(registry) -> None:
    await registry.revoke(_token("  abc123 ", subject_id="alice"))

    stored = await registry.get("abc123")
    assert stored.jti_hash == compute_jti_hash("abc123")
    assert stored.revoked_at == T0
    assert stored.subject_id == "alice"


@pytest.mark.asyncio
async def test_first_revocation_wins(registry) -> None:
    await registry.revoke(_token("abc123", reason="first"))
    await registry.revoke(_token("abc123", reason="second"))

    assert (await registry.get("abc123")).reason == "first"


@pytest.mark.asyncio
async def test_revoke_requires_jti(registry) -> None:
    with pytest.raises(InvalidRequest):
        await registry.revoke(_token("   "))


@pytest.mark.asyncio
async def test_is_revoked_false_for_unknown_or_blank(fake_uow, registry) -> None:
    assert not await registry.is_revoked("other")
    assert not await registry.is_revoked(None)
    assert not await registry.is_revoked("")
    assert fake_uow.revoked_tokens.exists_calls == 1


@pytest.mark.asyncio
async def test_cleanup_keeps_tokens_within_margin(registry) -> None:
    await registry.revoke(_token("old", expiration_time=T0 - timedelta(days=8)))
    await registry.revoke(_token("recent", expiration_time=T0 - timedelta(days=6)))
    await registry.revoke(_token("no-expiry"))

    assert await registry.cleanup_expired() == 1
    assert not await registry.is_revoked("old")
    assert await registry.is_revoked("recent")
    assert await registry.is_revoked("no-expiry")


@pytest.mark.asyncio
async def test_list_revoked_pages_and_filters(registry) -> None:
    for i in range(5):
        await registry.revoke(
            _token(
                f"jti-{i}",
                subject_id="alice" if i % 2 else "bob",
                revoked_at=T0 + timedelta(minutes=i),
            )
        )

    page, total = await registry.list_revoked(page=1, page_size=2)
    assert total == 5
    assert [t.jti for t in page] == ["jti-4", "jti-3"]

    page, total = await registry.list_revoked(page=2, page_size=2, subject_id="bob")
    assert total == 3
    assert [t.jti for t in page] == ["jti-0"]
