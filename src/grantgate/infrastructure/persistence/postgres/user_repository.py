"""PostgreSQL user profile repository implementation."""

from psycopg import AsyncConnection

from grantgate.domain.entities import UserProfile


class PostgresUserRepository:
    """User profiles keyed by token subject."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_subject_id(self, subject_id: str) -> UserProfile | None:
        cur = await self._conn.execute(
            "SELECT subject_id, user_name, display_name, english_name "
            "FROM app_user WHERE subject_id = %s AND enabled",
            (subject_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return UserProfile(subject_id=r[0], user_name=r[1], display_name=r[2], english_name=r[3])
