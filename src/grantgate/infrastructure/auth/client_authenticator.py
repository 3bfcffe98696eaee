"""Client credentials authenticator - registered client id and secret check."""

import base64
import hashlib
import hmac

from loguru import logger

from grantgate.domain.entities import RegisteredClient
from grantgate.domain.exceptions import InvalidClient


def hash_client_secret(secret: str, algorithm: str = "sha256") -> str:
    """Base64 digest in the form secrets are stored."""
    digest = hashlib.new(algorithm, secret.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


class ClientCredentialsAuthenticator:
    """Authenticates a calling client against the registered client store."""

    def __init__(self, unit_of_work_factory: type, allow_plaintext: bool = False) -> None:
        self._uow_factory = unit_of_work_factory
        self._allow_plaintext = allow_plaintext

    async def authenticate(self, client_id: str, client_secret: str) -> RegisteredClient:
        if not client_id or not client_secret:
            raise InvalidClient("Client credentials are required")
        async with self._uow_factory() as uow:
            client = await uow.clients.get_by_client_id(client_id)
        if not client or not client.enabled:
            logger.warning(f"Unknown or disabled client {client_id}")
            raise InvalidClient()
        if not any(self._matches(client_secret, stored) for stored in client.secrets):
            logger.warning(f"Wrong secret presented by client {client_id}")
            raise InvalidClient()
        return client

    def _matches(self, secret: str, stored: str) -> bool:
        candidates = [hash_client_secret(secret, "sha256"), hash_client_secret(secret, "sha512")]
        if self._allow_plaintext:
            candidates.append(secret)
        return any(
            hmac.compare_digest(candidate.encode("utf-8"), stored.encode("utf-8"))
            for candidate in candidates
        )
