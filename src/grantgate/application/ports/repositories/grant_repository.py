"""Permission grant repository port."""

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from grantgate.domain.entities import PermissionGrant
from grantgate.domain.value_objects import Subject


class GrantRepository(Protocol):
    """Port for permission grant persistence."""

    async def get_by_id(self, grant_id: UUID) -> PermissionGrant | None: ...

    async def list_for_subjects(self, subjects: Sequence[Subject]) -> list[PermissionGrant]: ...

    async def list_by_subject(self, subject: Subject) -> list[PermissionGrant]: ...

    async def list_by_resource(self, resource_id: UUID) -> list[PermissionGrant]: ...

    async def upsert_enabled(self, grant: PermissionGrant) -> tuple[PermissionGrant, bool]: ...

    async def update(self, grant: PermissionGrant) -> None: ...

    async def disable(self, grant_ids: Sequence[UUID]) -> int: ...
