"""User profile repository port."""

from typing import Protocol

from grantgate.domain.entities import UserProfile


class UserRepository(Protocol):
    """Port for user profile lookup by token subject."""

    async def get_by_subject_id(self, subject_id: str) -> UserProfile | None: ...
