"""PostgreSQL registered client repository implementation."""

from psycopg import AsyncConnection

from grantgate.domain.entities import RegisteredClient


class PostgresClientRepository:
    """Registered clients and their unexpired secrets."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_client_id(self, client_id: str) -> RegisteredClient | None:
        cur = await self._conn.execute(
            "SELECT client_id, client_name, enabled FROM registered_client WHERE client_id = %s",
            (client_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        cur = await self._conn.execute(
            "SELECT value FROM client_secret WHERE client_id = %s "
            "AND (expires_at IS NULL OR expires_at > now())",
            (client_id,),
        )
        secrets = [row[0] for row in await cur.fetchall()]
        return RegisteredClient(client_id=r[0], client_name=r[1], enabled=r[2], secrets=secrets)
