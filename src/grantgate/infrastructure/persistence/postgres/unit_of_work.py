"""PostgreSQL Unit of Work implementation."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import psycopg
from loguru import logger
from psycopg_pool import AsyncConnectionPool, PoolTimeout

from grantgate.domain.exceptions import StorageUnavailable
from grantgate.infrastructure.persistence.postgres.check_log_repository import (
    PostgresCheckLogRepository,
)
from grantgate.infrastructure.persistence.postgres.client_repository import (
    PostgresClientRepository,
)
from grantgate.infrastructure.persistence.postgres.grant_repository import (
    PostgresGrantRepository,
)
from grantgate.infrastructure.persistence.postgres.membership_repository import (
    PostgresMembershipRepository,
)
from grantgate.infrastructure.persistence.postgres.resource_repository import (
    PostgresResourceRepository,
)
from grantgate.infrastructure.persistence.postgres.revoked_token_repository import (
    PostgresRevokedTokenRepository,
)
from grantgate.infrastructure.persistence.postgres.scope_repository import (
    PostgresScopeRepository,
)
from grantgate.infrastructure.persistence.postgres.user_repository import (
    PostgresUserRepository,
)


class PostgresUnitOfWork:
    """PostgreSQL Unit of Work - one connection, one transaction."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool
        self._conn: object | None = None
        self._conn_cm: object | None = None

    async def __aenter__(self) -> "PostgresUnitOfWork":
        self._conn_cm = self._pool.connection()
        self._conn = await self._conn_cm.__aenter__()
        self._grants = PostgresGrantRepository(self._conn)
        self._resources = PostgresResourceRepository(self._conn)
        self._scopes = PostgresScopeRepository(self._conn)
        self._memberships = PostgresMembershipRepository(self._conn)
        self._revoked_tokens = PostgresRevokedTokenRepository(self._conn)
        self._clients = PostgresClientRepository(self._conn)
        self._users = PostgresUserRepository(self._conn)
        self._check_logs = PostgresCheckLogRepository(self._conn)
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if exc_type and self._conn:
            await self._conn.rollback()
        if self._conn_cm:
            await self._conn_cm.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def grants(self) -> PostgresGrantRepository:
        return self._grants

    @property
    def resources(self) -> PostgresResourceRepository:
        return self._resources

    @property
    def scopes(self) -> PostgresScopeRepository:
        return self._scopes

    @property
    def memberships(self) -> PostgresMembershipRepository:
        return self._memberships

    @property
    def revoked_tokens(self) -> PostgresRevokedTokenRepository:
        return self._revoked_tokens

    @property
    def clients(self) -> PostgresClientRepository:
        return self._clients

    @property
    def users(self) -> PostgresUserRepository:
        return self._users

    @property
    def check_logs(self) -> PostgresCheckLogRepository:
        return self._check_logs

    async def commit(self) -> None:
        if self._conn:
            await self._conn.commit()

    async def rollback(self) -> None:
        if self._conn:
            await self._conn.rollback()


def create_uow_factory(pool: AsyncConnectionPool) -> object:
    """Create UnitOfWork factory (async context manager).

    Pool exhaustion and connection or timeout failures surface as StorageUnavailable.
    """

    @asynccontextmanager
    async def factory() -> AsyncIterator[PostgresUnitOfWork]:
        try:
            uow = PostgresUnitOfWork(pool)
            async with uow:
                try:
                    yield uow
                    await uow.commit()
                except BaseException:
                    await uow.rollback()
                    raise
        except (psycopg.OperationalError, PoolTimeout) as e:
            logger.error(f"Database unavailable: {e!r}")
            raise StorageUnavailable() from e

    return factory
