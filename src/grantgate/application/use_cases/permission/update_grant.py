"""Update grant use case."""

from datetime import datetime
from uuid import UUID

from grantgate.domain.entities import PermissionGrant
from grantgate.domain.exceptions import InvalidRequest, NotFound
from grantgate.domain.value_objects import ScopeSet

UNSET = object()


class UpdateGrantUseCase:
    """Replace scopes, inheritance or expiry of an existing grant."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(
        self,
        grant_id: UUID,
        scopes: ScopeSet | None = None,
        inherit_to_children: bool | None = None,
        expires_at: datetime | None | object = UNSET,
    ) -> PermissionGrant:
        """Fields left as None (or UNSET for expires_at) keep their value."""
        if scopes is not None and not scopes:
            raise InvalidRequest("At least one scope is required")

        async with self._uow_factory() as uow:
            grant = await uow.grants.get_by_id(grant_id)
            if not grant:
                raise NotFound("Grant", grant_id)
            if scopes is not None:
                grant.scopes = scopes
            if inherit_to_children is not None:
                grant.inherit_to_children = inherit_to_children
            if expires_at is not UNSET:
                grant.expires_at = expires_at
            await uow.grants.update(grant)
            return grant
