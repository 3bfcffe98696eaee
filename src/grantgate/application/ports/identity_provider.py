"""Identity provider port - upstream token endpoints that are intercepted."""

from collections.abc import Mapping
from typing import Protocol

from grantgate.application.dto.upstream import UpstreamResponse


class IdentityProviderClient(Protocol):
    """Port for the identity provider's native introspection and revocation."""

    async def introspect(
        self, form: Mapping[str, str], authorization: str | None
    ) -> UpstreamResponse: ...

    async def revoke(
        self, form: Mapping[str, str], authorization: str | None
    ) -> UpstreamResponse: ...
