"""PostgreSQL permission check log repository implementation."""

from psycopg import AsyncConnection

from grantgate.domain.entities import PermissionCheckLog


class PostgresCheckLogRepository:
    """Append-only permission check audit log."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def add(self, entry: PermissionCheckLog) -> None:
        await self._conn.execute(
            "INSERT INTO permission_check_log (id, checked_at, client_id, subject_id, user_name, "
            "resource, requested_scopes, granted_scopes, allowed, success, error_code, "
            "error_message, ip_address, user_agent, processing_time_ms) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                entry.id,
                entry.checked_at,
                entry.client_id,
                entry.subject_id,
                entry.user_name,
                entry.resource,
                entry.requested_scopes,
                entry.granted_scopes,
                entry.allowed,
                entry.success,
                entry.error_code,
                entry.error_message,
                entry.ip_address,
                entry.user_agent,
                entry.processing_time_ms,
            ),
        )
