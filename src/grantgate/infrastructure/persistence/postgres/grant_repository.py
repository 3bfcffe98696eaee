"""PostgreSQL permission grant repository implementation."""

from collections.abc import Sequence
from uuid import UUID

from psycopg import AsyncConnection

from grantgate.domain.entities import PermissionGrant
from grantgate.domain.value_objects import ScopeSet, Subject, SubjectType

_COLUMNS = (
    "id, subject_type, subject_id, subject_name, resource_id, scopes, "
    "inherit_to_children, enabled, expires_at, granted_by, granted_at"
)


def _to_grant(r: tuple) -> PermissionGrant:
    return PermissionGrant(
        id=r[0],
        subject_type=SubjectType(r[1]),
        subject_id=r[2],
        subject_name=r[3],
        resource_id=r[4],
        scopes=ScopeSet.parse(r[5]),
        inherit_to_children=r[6],
        enabled=r[7],
        expires_at=r[8],
        granted_by=r[9],
        granted_at=r[10],
    )


class PostgresGrantRepository:
    """Permission grant repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, grant_id: UUID) -> PermissionGrant | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission_grant WHERE id = %s",
            (grant_id,),
        )
        r = await cur.fetchone()
        return _to_grant(r) if r else None

    async def list_for_subjects(self, subjects: Sequence[Subject]) -> list[PermissionGrant]:
        """All grants (any state) held by any of the subjects, oldest first."""
        if not subjects:
            return []
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission_grant "
            "WHERE (subject_type, subject_id) IN "
            "(SELECT * FROM unnest(%s::text[], %s::text[])) "
            "ORDER BY granted_at, id",
            ([str(s.type) for s in subjects], [s.id for s in subjects]),
        )
        return [_to_grant(r) for r in await cur.fetchall()]

    async def list_by_subject(self, subject: Subject) -> list[PermissionGrant]:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission_grant "
            "WHERE subject_type = %s AND subject_id = %s ORDER BY granted_at, id",
            (str(subject.type), subject.id),
        )
        return [_to_grant(r) for r in await cur.fetchall()]

    async def list_by_resource(self, resource_id: UUID) -> list[PermissionGrant]:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission_grant "
            "WHERE resource_id = %s ORDER BY granted_at, id",
            (resource_id,),
        )
        return [_to_grant(r) for r in await cur.fetchall()]

    async def upsert_enabled(self, grant: PermissionGrant) -> tuple[PermissionGrant, bool]:
        """Insert the grant or replace the enabled grant for the same subject and resource.

        Returns the stored row and whether it was newly inserted. The partial
        unique index keeps one enabled row per subject and resource.
        """
        cur = await self._conn.execute(
            f"INSERT INTO permission_grant ({_COLUMNS}) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s) "
            "ON CONFLICT (subject_type, subject_id, resource_id) WHERE enabled DO UPDATE SET "
            "scopes = EXCLUDED.scopes, "
            "inherit_to_children = EXCLUDED.inherit_to_children, "
            "expires_at = EXCLUDED.expires_at, "
            "subject_name = COALESCE(EXCLUDED.subject_name, permission_grant.subject_name), "
            "granted_by = EXCLUDED.granted_by "
            f"RETURNING {_COLUMNS}, (xmax = 0) AS inserted",
            (
                grant.id,
                str(grant.subject_type),
                grant.subject_id,
                grant.subject_name,
                grant.resource_id,
                grant.scopes.serialize(),
                grant.inherit_to_children,
                grant.enabled,
                grant.expires_at,
                grant.granted_by,
                grant.granted_at,
            ),
        )
        r = await cur.fetchone()
        return _to_grant(r), r[11]

    async def update(self, grant: PermissionGrant) -> None:
        await self._conn.execute(
            "UPDATE permission_grant SET scopes=%s, inherit_to_children=%s, expires_at=%s, "
            "subject_name=%s, granted_by=%s, enabled=%s WHERE id=%s",
            (
                grant.scopes.serialize(),
                grant.inherit_to_children,
                grant.expires_at,
                grant.subject_name,
                grant.granted_by,
                grant.enabled,
                grant.id,
            ),
        )

    async def disable(self, grant_ids: Sequence[UUID]) -> int:
        cur = await self._conn.execute(
            "UPDATE permission_grant SET enabled = false WHERE id = ANY(%s) AND enabled",
            (list(grant_ids),),
        )
        return cur.rowcount
