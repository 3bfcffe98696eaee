"""Permission resource repository port."""

from typing import Protocol
from uuid import UUID

from grantgate.domain.entities import PermissionResource


class ResourceRepository(Protocol):
    """Port for resource tree reads."""

    async def get_by_id(self, resource_id: UUID) -> PermissionResource | None: ...

    async def list_enabled(self, client_id: str | None = None) -> list[PermissionResource]: ...
