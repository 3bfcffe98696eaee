"""PostgreSQL permission resource repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from grantgate.domain.entities import PermissionResource

_COLUMNS = (
    "id, client_id, client_name, code, name, resource_type, parent_id, "
    "sort_order, enabled, description, uri, created_at"
)


def _to_resource(r: tuple) -> PermissionResource:
    return PermissionResource(
        id=r[0],
        client_id=r[1],
        client_name=r[2],
        code=r[3],
        name=r[4],
        resource_type=r[5],
        parent_id=r[6],
        sort_order=r[7],
        enabled=r[8],
        description=r[9],
        uri=r[10],
        created_at=r[11],
    )


class PostgresResourceRepository:
    """Resource repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, resource_id: UUID) -> PermissionResource | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission_resource WHERE id = %s",
            (resource_id,),
        )
        r = await cur.fetchone()
        return _to_resource(r) if r else None

    async def list_enabled(self, client_id: str | None = None) -> list[PermissionResource]:
        """Enabled resources, optionally of one client."""
        if client_id is None:
            cur = await self._conn.execute(
                f"SELECT {_COLUMNS} FROM permission_resource WHERE enabled "
                "ORDER BY client_id, sort_order, name"
            )
        else:
            cur = await self._conn.execute(
                f"SELECT {_COLUMNS} FROM permission_resource WHERE enabled AND client_id = %s "
                "ORDER BY sort_order, name",
                (client_id,),
            )
        return [_to_resource(r) for r in await cur.fetchall()]
