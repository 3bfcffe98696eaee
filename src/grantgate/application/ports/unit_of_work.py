"""Unit of Work port - transactional boundary."""

from collections.abc import AsyncIterator
from typing import Protocol

from grantgate.application.ports.repositories import (
    CheckLogRepository,
    ClientRepository,
    GrantRepository,
    MembershipRepository,
    ResourceRepository,
    RevokedTokenRepository,
    ScopeRepository,
    UserRepository,
)


class UnitOfWork(Protocol):
    """Unit of Work - manages transaction and repository access."""

    @property
    def grants(self) -> GrantRepository: ...

    @property
    def resources(self) -> ResourceRepository: ...

    @property
    def scopes(self) -> ScopeRepository: ...

    @property
    def memberships(self) -> MembershipRepository: ...

    @property
    def revoked_tokens(self) -> RevokedTokenRepository: ...

    @property
    def clients(self) -> ClientRepository: ...

    @property
    def users(self) -> UserRepository: ...

    @property
    def check_logs(self) -> CheckLogRepository: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory for creating UnitOfWork instances."""

    async def __call__(self) -> AsyncIterator[UnitOfWork]: ...
