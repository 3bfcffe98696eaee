"""Token trust ports - signing keys, revocation lookups and token verification."""

from typing import Protocol

from grantgate.application.dto.trust import KeySetSnapshot, TrustResult
from grantgate.domain.entities import RegisteredClient


class SigningKeyProvider(Protocol):
    """Port for the issuer's current signing keys."""

    async def get(self) -> KeySetSnapshot: ...

    async def refresh(self, force: bool = False, kid: str | None = None) -> KeySetSnapshot: ...


class RevocationChecker(Protocol):
    """Port for revocation lookups by jti."""

    async def is_revoked(self, jti: str) -> bool: ...


class TokenVerifier(Protocol):
    """Port for deciding whether a bearer token is trusted."""

    async def verify(self, raw_token: str) -> TrustResult: ...


class ClientAuthenticator(Protocol):
    """Port for checking a calling client's credentials."""

    async def authenticate(self, client_id: str, client_secret: str) -> RegisteredClient: ...
