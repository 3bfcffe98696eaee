"""Revoked token repository port."""

from datetime import datetime
from typing import Protocol

from grantgate.domain.entities import RevokedToken


class RevokedTokenRepository(Protocol):
    """Port for the revoked token table."""

    async def insert_if_absent(self, token: RevokedToken) -> bool:
        """Insert unless the jti exists; False when it already did."""
        ...

    async def exists(self, jti: str) -> bool: ...

    async def get(self, jti: str) -> RevokedToken | None: ...

    async def list_page(
        self,
        offset: int,
        limit: int,
        subject_id: str | None = None,
        client_id: str | None = None,
    ) -> tuple[list[RevokedToken], int]: ...

    async def delete_expired_before(self, cutoff: datetime) -> int: ...
