"""Grant permission use case."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from loguru import logger

from grantgate.domain.entities import PermissionGrant
from grantgate.domain.exceptions import InvalidRequest, NotFound
from grantgate.domain.value_objects import ScopeSet, Subject


class GrantPermissionUseCase:
    """Grant scopes on a resource to a subject, replacing an enabled grant for the same tuple."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(
        self,
        actor_id: str,
        subject: Subject,
        resource_id: UUID,
        scopes: ScopeSet,
        subject_name: str | None = None,
        inherit_to_children: bool = False,
        expires_at: datetime | None = None,
    ) -> PermissionGrant:
        if not scopes:
            raise InvalidRequest("At least one scope is required")
        if not subject.id:
            raise InvalidRequest("subjectId is required")

        now = datetime.now(UTC)
        async with self._uow_factory() as uow:
            resource = await uow.resources.get_by_id(resource_id)
            if not resource:
                raise NotFound("Resource", resource_id)

            grant, created = await uow.grants.upsert_enabled(
                PermissionGrant(
                    id=uuid4(),
                    subject_type=subject.type,
                    subject_id=subject.id,
                    subject_name=subject_name,
                    resource_id=resource_id,
                    scopes=scopes,
                    inherit_to_children=inherit_to_children,
                    expires_at=expires_at,
                    granted_by=actor_id,
                    granted_at=now,
                )
            )
            action = "Created" if created else "Updated"
            logger.info(f"{action} grant {grant.id} for {subject} on {resource.code}")
            return grant
