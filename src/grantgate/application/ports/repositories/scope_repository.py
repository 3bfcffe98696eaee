"""Permission scope repository port."""

from typing import Protocol

from grantgate.domain.entities import PermissionScope


class ScopeRepository(Protocol):
    """Port for scope reference data."""

    async def list_all(self) -> list[PermissionScope]: ...
