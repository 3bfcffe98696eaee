"""Membership repository port."""

from typing import Protocol

from grantgate.domain.entities import Membership, Organization


class MembershipRepository(Protocol):
    """Port for group and organization membership reads."""

    async def list_for_user(self, user_id: str) -> list[Membership]: ...

    async def get_organization(self, organization_id: str) -> Organization | None: ...
