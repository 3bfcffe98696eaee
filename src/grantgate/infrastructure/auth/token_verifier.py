"""Token trust verifier - signature, expiry and revocation checks for bearer tokens."""

from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any

import jwt
from loguru import logger

from grantgate.application.dto.trust import KeySetSnapshot, TrustResult
from grantgate.application.ports import RevocationChecker, SigningKeyProvider
from grantgate.domain.exceptions import (
    InvalidSignature,
    InvalidToken,
    MalformedToken,
    TokenExpired,
    TokenRevoked,
)

SUPPORTED_ALGORITHMS = (
    "RS256",
    "RS384",
    "RS512",
    "PS256",
    "PS384",
    "PS512",
    "ES256",
    "ES384",
    "ES512",
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenTrustVerifier:
    """Decides whether an externally presented JWT is trusted.

    Only asymmetric algorithms are accepted. A token whose key is missing from
    the cached set, or whose signature fails, triggers one forced key refresh
    before it is rejected. Never writes to the revocation registry.
    """

    def __init__(
        self,
        key_provider: SigningKeyProvider,
        revocation_checker: RevocationChecker,
        audiences: Sequence[str] = (),
        issuer: str | None = None,
        algorithms: Sequence[str] = SUPPORTED_ALGORITHMS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._keys = key_provider
        self._revocations = revocation_checker
        self._audiences = list(audiences)
        self._issuer = issuer
        self._algorithms = frozenset(algorithms)
        self._clock = clock

    async def verify(self, raw_token: str) -> TrustResult:
        token = (raw_token or "").strip()
        if not token:
            raise MalformedToken("Token is empty")
        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError:
            raise MalformedToken() from None
        alg = header.get("alg")
        if not isinstance(alg, str) or alg not in self._algorithms:
            raise MalformedToken(f"Unsupported signing algorithm: {alg}")
        kid = header.get("kid")

        claims = self._decode(token, await self._keys.get(), kid, alg)
        if claims is None:
            logger.debug(f"No matching key or bad signature for kid {kid}, refreshing keys")
            claims = self._decode(
                token, await self._keys.refresh(force=True, kid=kid), kid, alg
            )
            if claims is None:
                logger.warning(f"Rejected token with invalid signature (kid {kid})")
                raise InvalidSignature()

        exp = claims.get("exp")
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            raise MalformedToken("Token exp claim is not numeric")
        try:
            expires_at = datetime.fromtimestamp(exp, UTC)
        except (OverflowError, OSError, ValueError):
            raise MalformedToken("Token exp claim is out of range") from None
        if expires_at <= self._clock():
            raise TokenExpired()

        jti = claims.get("jti")
        if isinstance(jti, str) and jti and await self._revocations.is_revoked(jti):
            logger.warning(f"Rejected revoked token for subject {claims.get('sub')}")
            raise TokenRevoked()

        subject_id = claims.get("sub")
        if not isinstance(subject_id, str) or not subject_id:
            raise MalformedToken("Token has no subject")

        return TrustResult(
            subject_id=subject_id,
            subject_name=claims.get("name") or claims.get("preferred_username"),
            client_id=claims.get("client_id") or claims.get("azp"),
            jti=jti if isinstance(jti, str) else None,
            expires_at=expires_at,
            claims=claims,
        )

    def _decode(
        self, token: str, snapshot: KeySetSnapshot, kid: str | None, alg: str
    ) -> dict[str, Any] | None:
        """Claims when the signature verifies; None when the key is missing or the signature is bad."""
        key = snapshot.find(kid)
        if key is None:
            return None
        try:
            return jwt.decode(
                token,
                key.key,
                algorithms=[alg],
                issuer=self._issuer or snapshot.issuer,
                audience=self._audiences or None,
                options={
                    "require": ["exp"],
                    "verify_exp": False,
                    "verify_aud": bool(self._audiences),
                },
            )
        except jwt.InvalidSignatureError:
            return None
        except (jwt.InvalidIssuerError, jwt.InvalidAudienceError) as e:
            logger.warning(f"Rejected token: {e}")
            raise InvalidToken(str(e)) from None
        except jwt.MissingRequiredClaimError as e:
            raise MalformedToken(str(e)) from None
        except jwt.ImmatureSignatureError as e:
            raise InvalidToken(str(e)) from None
        except jwt.PyJWTError as e:
            raise MalformedToken(str(e)) from None
        except (TypeError, ValueError, AttributeError):
            return None
