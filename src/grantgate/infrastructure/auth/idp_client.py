"""HTTP client for the identity provider's introspection and revocation endpoints."""

from collections.abc import Mapping

import httpx
from loguru import logger

from grantgate.application.dto.upstream import UpstreamResponse

_UNAVAILABLE = UpstreamResponse.encode_json({"error": "temporarily_unavailable"})


class HttpIdentityProviderClient:
    """Relays form posts to the identity provider, keeping status and body."""

    def __init__(
        self,
        introspection_url: str,
        revocation_url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._introspection_url = introspection_url
        self._revocation_url = revocation_url
        self._timeout = timeout
        self._transport = transport

    async def introspect(
        self, form: Mapping[str, str], authorization: str | None
    ) -> UpstreamResponse:
        return await self._post(self._introspection_url, form, authorization)

    async def revoke(self, form: Mapping[str, str], authorization: str | None) -> UpstreamResponse:
        return await self._post(self._revocation_url, form, authorization)

    async def _post(
        self, url: str, form: Mapping[str, str], authorization: str | None
    ) -> UpstreamResponse:
        headers = {"Authorization": authorization} if authorization else {}
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                r = await client.post(url, data=dict(form), headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Identity provider request to {url} failed: {e!r}")
            return UpstreamResponse(503, _UNAVAILABLE, "application/json")
        return UpstreamResponse(r.status_code, r.content, r.headers.get("content-type"))
