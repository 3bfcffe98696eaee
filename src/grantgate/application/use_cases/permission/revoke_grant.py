"""Revoke grant use case."""

from collections.abc import Sequence
from uuid import UUID

from loguru import logger

from grantgate.domain.exceptions import InvalidRequest, NotFound


class RevokeGrantUseCase:
    """Disable grants; disabled rows are kept for audit."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, grant_ids: Sequence[UUID]) -> int:
        if not grant_ids:
            raise InvalidRequest("No grant ids given")
        async with self._uow_factory() as uow:
            count = await uow.grants.disable(grant_ids)
        if count == 0:
            raise NotFound("Grant", ", ".join(str(g) for g in grant_ids))
        logger.info(f"Disabled {count} grant(s)")
        return count
