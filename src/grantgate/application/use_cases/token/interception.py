"""Interception of the identity provider's introspection and revocation endpoints."""

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import jwt
from loguru import logger

from grantgate.application.dto.upstream import UpstreamResponse
from grantgate.application.ports import IdentityProviderClient
from grantgate.application.use_cases.token.revocation_registry import RevocationRegistry
from grantgate.domain.entities import RevokedToken

REVOCATION_REASON = "Revoked via revocation endpoint"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _expiry(exp: Any) -> datetime | None:
    """exp claim as a datetime; None when absent, non-numeric or out of range."""
    if not isinstance(exp, (int, float)) or isinstance(exp, bool):
        return None
    try:
        return datetime.fromtimestamp(exp, UTC)
    except (OverflowError, OSError, ValueError):
        return None


def overlay_introspection(
    native: Mapping[str, Any], revoked: bool, now: datetime
) -> dict[str, Any]:
    """Downgrade an active introspection result when the token is revoked or expired.

    Inactive results pass through untouched.
    """
    if not native.get("active"):
        return dict(native)
    if revoked:
        return {"active": False}
    expires_at = _expiry(native.get("exp"))
    if expires_at is not None and expires_at <= now:
        return {"active": False}
    return dict(native)


def _unverified_claims(token: str) -> dict[str, Any] | None:
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None


class IntrospectionInterceptor:
    """Wraps upstream introspection so revoked or expired tokens report inactive."""

    def __init__(
        self,
        identity_provider: IdentityProviderClient,
        registry: RevocationRegistry,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._idp = identity_provider
        self._registry = registry
        self._clock = clock

    async def introspect(
        self, form: Mapping[str, str], authorization: str | None = None
    ) -> UpstreamResponse:
        response = await self._idp.introspect(form, authorization)
        if not response.ok:
            return response
        try:
            native = response.json()
        except ValueError:
            logger.warning("Upstream introspection returned a non-JSON body")
            return response
        if not isinstance(native, dict) or not native.get("active"):
            return response

        jti = native.get("jti")
        if not jti:
            claims = _unverified_claims(form.get("token", "")) or {}
            jti = claims.get("jti")
        revoked = await self._registry.is_revoked(jti) if isinstance(jti, str) else False
        result = overlay_introspection(native, revoked, self._clock())
        if result == native:
            return response
        logger.info("Introspection overridden to inactive")
        return UpstreamResponse(
            status=response.status,
            body=UpstreamResponse.encode_json(result),
            content_type="application/json",
        )


class RevocationInterceptor:
    """Forwards revocation upstream and records the token's jti on success.

    Recording is best effort; the upstream response is always returned as is.
    """

    def __init__(
        self,
        identity_provider: IdentityProviderClient,
        registry: RevocationRegistry,
    ) -> None:
        self._idp = identity_provider
        self._registry = registry

    async def revoke(
        self, form: Mapping[str, str], authorization: str | None = None
    ) -> UpstreamResponse:
        response = await self._idp.revoke(form, authorization)
        if not response.ok:
            return response
        try:
            await self._record(form)
        except Exception:
            logger.exception("Failed to record revoked token")
        return response

    async def _record(self, form: Mapping[str, str]) -> None:
        token = form.get("token") or ""
        claims = _unverified_claims(token)
        if not claims:
            logger.debug("Revoked token is not a JWT, nothing to record")
            return
        jti = claims.get("jti")
        if not isinstance(jti, str) or not jti:
            logger.debug("Revoked token has no jti, nothing to record")
            return
        expiration = _expiry(claims.get("exp"))
        await self._registry.revoke(
            RevokedToken(
                jti=jti,
                client_id=str(claims.get("client_id") or form.get("client_id") or ""),
                subject_id=claims.get("sub"),
                token_type=form.get("token_type_hint") or "access_token",
                expiration_time=expiration,
                reason=REVOCATION_REASON,
            )
        )
