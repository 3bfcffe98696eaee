"""Effective permission resolver - merges direct, group and organization grants."""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from loguru import logger

from grantgate.application.ports import UnitOfWork
from grantgate.domain.entities import (
    EffectivePermission,
    PermissionGrant,
    PermissionProvenance,
)
from grantgate.domain.resource_tree import ResourceTree
from grantgate.domain.value_objects import (
    STANDARD_SCOPES,
    PermissionSource,
    ScopeSet,
    Subject,
    SubjectType,
    requested_scope_codes,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class _Contribution:
    source: PermissionSource
    source_id: str
    source_name: str | None
    scopes: ScopeSet


@dataclass
class _Accumulator:
    """Scopes on one resource, contributors kept in first-seen order."""

    scopes: ScopeSet = field(default_factory=ScopeSet.empty)
    contributions: dict[tuple[PermissionSource, str], _Contribution] = field(default_factory=dict)

    def add(self, source: PermissionSource, grant: PermissionGrant) -> None:
        self.scopes = self.scopes | grant.scopes
        key = (source, grant.subject_id)
        existing = self.contributions.get(key)
        if existing is None:
            self.contributions[key] = _Contribution(
                source, grant.subject_id, grant.subject_name, grant.scopes
            )
        else:
            existing.scopes = existing.scopes | grant.scopes
            existing.source_name = existing.source_name or grant.subject_name


def _grant_order(grant: PermissionGrant) -> tuple[int, datetime]:
    return (0 if grant.subject_type == SubjectType.USER else 1, grant.granted_at)


class EffectivePermissionResolver:
    """Computes a user's effective permissions over the resource tree.

    Grants are additive; the merged scopes of a resource are the union of every
    active grant on it or on an ancestor that inherits to children. Nothing is
    cached between calls.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        clock: Callable[[], datetime] = _utcnow,
        standard_scopes: Sequence[str] = STANDARD_SCOPES,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._clock = clock
        self._standard_scopes = tuple(standard_scopes)

    async def resolve(self, user_id: str) -> list[EffectivePermission]:
        async with self._uow_factory() as uow:
            tree = ResourceTree.build(await uow.resources.list_enabled())
            return await self.resolve_in(uow, tree, user_id)

    async def check(
        self,
        user_id: str,
        client_id: str,
        resource_code: str,
        requested: object = None,
    ) -> dict[str, bool]:
        """Map each requested scope code to whether the user holds it on the resource.

        Raises ResourceUnknown when the code does not name a resource of the client.
        """
        async with self._uow_factory() as uow:
            tree = ResourceTree.build(await uow.resources.list_enabled(client_id))
            resource_id = tree.resolve_by_code(client_id, resource_code)
            permissions = await self.resolve_in(uow, tree, user_id)
        granted = next(
            (p.scopes for p in permissions if p.resource_id == resource_id),
            ScopeSet.empty(),
        )
        codes = requested_scope_codes(requested, default=self._standard_scopes)
        return {code: granted.contains(code) for code in codes}

    async def resolve_in(
        self, uow: UnitOfWork, tree: ResourceTree, user_id: str
    ) -> list[EffectivePermission]:
        """Resolve inside an open unit of work against an already built tree."""
        grants = await self._collect_grants(uow, user_id)
        now = self._clock()
        active: dict[UUID, PermissionGrant] = {}
        for grant in grants:
            if grant.id in active or not grant.is_active(now):
                continue
            if grant.subject_type == SubjectType.ROLE:
                continue
            active[grant.id] = grant

        merged: dict[UUID, _Accumulator] = {}
        for grant in sorted(active.values(), key=_grant_order):
            if grant.resource_id not in tree:
                logger.debug(
                    f"Skipping grant {grant.id}: resource {grant.resource_id} not in enabled tree"
                )
                continue
            source = PermissionSource.for_subject(grant.subject_type)
            targets = [grant.resource_id]
            if grant.inherit_to_children:
                targets.extend(sorted(tree.descendants_of(grant.resource_id), key=str))
            for resource_id in targets:
                merged.setdefault(resource_id, _Accumulator()).add(source, grant)

        return [self._to_effective(tree, rid, acc) for rid, acc in merged.items()]

    async def _collect_grants(self, uow: UnitOfWork, user_id: str) -> list[PermissionGrant]:
        memberships = await uow.memberships.list_for_user(user_id)
        subjects = [Subject(SubjectType.USER, user_id)]
        organizations: list[str] = []
        for membership in memberships:
            if membership.subject.type == SubjectType.GROUP:
                subjects.append(membership.subject)
            elif membership.subject.type == SubjectType.ORGANIZATION:
                subjects.append(membership.subject)
                organizations.append(membership.subject.id)
            else:
                logger.warning(f"Ignoring membership of unsupported kind {membership.subject}")

        grants = await uow.grants.list_for_subjects(subjects)

        ancestors = await self._inherited_organizations(uow, organizations)
        known = set(subjects)
        ancestor_subjects = [
            Subject(SubjectType.ORGANIZATION, org_id)
            for org_id in ancestors
            if Subject(SubjectType.ORGANIZATION, org_id) not in known
        ]
        if ancestor_subjects:
            inherited = await uow.grants.list_for_subjects(ancestor_subjects)
            grants.extend(g for g in inherited if g.inherit_to_children)
        return grants

    async def _inherited_organizations(
        self, uow: UnitOfWork, organization_ids: Iterable[str]
    ) -> list[str]:
        """Ancestor organizations reachable while each level inherits from its parent."""
        result: list[str] = []
        for organization_id in organization_ids:
            visited = {organization_id}
            organization = await uow.memberships.get_organization(organization_id)
            while (
                organization is not None
                and organization.inherit_parent_permissions
                and organization.parent_id
            ):
                parent_id = organization.parent_id
                if parent_id in visited:
                    logger.warning(f"Organization hierarchy cycle at {parent_id}")
                    break
                visited.add(parent_id)
                if parent_id not in result:
                    result.append(parent_id)
                organization = await uow.memberships.get_organization(parent_id)
        return result

    @staticmethod
    def _to_effective(
        tree: ResourceTree, resource_id: UUID, acc: _Accumulator
    ) -> EffectivePermission:
        resource = tree.get(resource_id)
        provenance = tuple(
            PermissionProvenance(c.source, c.source_id, c.source_name, c.scopes)
            for c in acc.contributions.values()
        )
        primary = provenance[0]
        return EffectivePermission(
            resource_id=resource_id,
            resource_code=resource.code,
            scopes=acc.scopes,
            source=primary.source,
            source_id=primary.source_id,
            source_name=primary.source_name,
            provenance=provenance,
            resource_name=resource.name,
            client_id=resource.client_id,
            client_name=resource.client_name,
        )
