"""PostgreSQL revoked token repository implementation."""

from datetime import datetime

from psycopg import AsyncConnection

from grantgate.domain.entities import RevokedToken

_COLUMNS = (
    "jti, client_id, subject_id, token_type, expiration_time, revoked_at, "
    "reason, revoked_by, jti_hash"
)


def _to_token(r: tuple) -> RevokedToken:
    return RevokedToken(
        jti=r[0],
        client_id=r[1],
        subject_id=r[2],
        token_type=r[3],
        expiration_time=r[4],
        revoked_at=r[5],
        reason=r[6],
        revoked_by=r[7],
        jti_hash=r[8],
    )


class PostgresRevokedTokenRepository:
    """Revoked token table; jti is the primary key."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def insert_if_absent(self, token: RevokedToken) -> bool:
        cur = await self._conn.execute(
            f"INSERT INTO revoked_token ({_COLUMNS}) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s) "
            "ON CONFLICT (jti) DO NOTHING RETURNING jti",
            (
                token.jti,
                token.client_id,
                token.subject_id,
                token.token_type,
                token.expiration_time,
                token.revoked_at,
                token.reason,
                token.revoked_by,
                token.jti_hash,
            ),
        )
        return await cur.fetchone() is not None

    async def exists(self, jti: str) -> bool:
        cur = await self._conn.execute(
            "SELECT 1 FROM revoked_token WHERE jti = %s",
            (jti,),
        )
        return await cur.fetchone() is not None

    async def get(self, jti: str) -> RevokedToken | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM revoked_token WHERE jti = %s",
            (jti,),
        )
        r = await cur.fetchone()
        return _to_token(r) if r else None

    async def list_page(
        self,
        offset: int,
        limit: int,
        subject_id: str | None = None,
        client_id: str | None = None,
    ) -> tuple[list[RevokedToken], int]:
        where = (
            "WHERE (%(subject)s::text IS NULL OR subject_id = %(subject)s) "
            "AND (%(client)s::text IS NULL OR client_id = %(client)s)"
        )
        params = {"subject": subject_id, "client": client_id, "offset": offset, "limit": limit}
        cur = await self._conn.execute(f"SELECT count(*) FROM revoked_token {where}", params)
        total = (await cur.fetchone())[0]
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM revoked_token {where} "
            "ORDER BY revoked_at DESC, jti OFFSET %(offset)s LIMIT %(limit)s",
            params,
        )
        return [_to_token(r) for r in await cur.fetchall()], total

    async def delete_expired_before(self, cutoff: datetime) -> int:
        cur = await self._conn.execute(
            "DELETE FROM revoked_token WHERE expiration_time IS NOT NULL AND expiration_time < %s",
            (cutoff,),
        )
        return cur.rowcount
