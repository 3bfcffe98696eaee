"""Permission resource entity - node of a client's resource forest."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass
class PermissionResource:
    """Protected resource; parent_id None marks a root."""

    id: UUID
    client_id: str
    code: str
    name: str
    client_name: str | None = None
    resource_type: str | None = None
    parent_id: UUID | None = None
    sort_order: int = 0
    enabled: bool = True
    description: str | None = None
    uri: str | None = None
    created_at: datetime | None = None
