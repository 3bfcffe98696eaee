"""PostgreSQL permission scope repository implementation."""

from psycopg import AsyncConnection

from grantgate.domain.entities import PermissionScope


class PostgresScopeRepository:
    """Scope reference data."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def list_all(self) -> list[PermissionScope]:
        cur = await self._conn.execute(
            "SELECT code, name, description, sort_order FROM permission_scope "
            "ORDER BY sort_order, code"
        )
        rows = await cur.fetchall()
        return [
            PermissionScope(code=r[0], name=r[1], description=r[2], sort_order=r[3])
            for r in rows
        ]
