"""PostgreSQL membership repository implementation."""

from psycopg import AsyncConnection

from grantgate.domain.entities import Membership, Organization
from grantgate.domain.value_objects import Subject, SubjectType


class PostgresMembershipRepository:
    """Group and organization memberships of users."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def list_for_user(self, user_id: str) -> list[Membership]:
        """Direct memberships; groups first, then organizations."""
        cur = await self._conn.execute(
            "SELECT 'Group', g.id, g.name FROM group_membership m "
            "JOIN user_group g ON g.id = m.group_id WHERE m.user_id = %s "
            "UNION ALL "
            "SELECT 'Organization', o.id, o.name FROM organization_membership m "
            "JOIN organization o ON o.id = m.organization_id WHERE m.user_id = %s",
            (user_id, user_id),
        )
        rows = await cur.fetchall()
        return [Membership(subject=Subject(SubjectType(r[0]), r[1]), name=r[2]) for r in rows]

    async def get_organization(self, organization_id: str) -> Organization | None:
        cur = await self._conn.execute(
            "SELECT id, name, parent_id, inherit_parent_permissions "
            "FROM organization WHERE id = %s",
            (organization_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return Organization(id=r[0], name=r[1], parent_id=r[2], inherit_parent_permissions=r[3])
