"""Registered client repository port."""

from typing import Protocol

from grantgate.domain.entities import RegisteredClient


class ClientRepository(Protocol):
    """Port for registered client lookup."""

    async def get_by_client_id(self, client_id: str) -> RegisteredClient | None: ...
