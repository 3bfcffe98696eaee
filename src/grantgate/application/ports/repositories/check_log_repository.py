"""Permission check log repository port."""

from typing import Protocol

from grantgate.domain.entities import PermissionCheckLog


class CheckLogRepository(Protocol):
    """Port for the permission check audit log."""

    async def add(self, entry: PermissionCheckLog) -> None: ...
