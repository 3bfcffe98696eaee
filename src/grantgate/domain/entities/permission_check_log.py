"""Permission check audit record."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass
class PermissionCheckLog:
    """One checkPermission call and its outcome."""

    id: UUID
    checked_at: datetime
    client_id: str
    resource: str
    requested_scopes: str
    subject_id: str | None = None
    user_name: str | None = None
    granted_scopes: str | None = None
    allowed: bool = False
    success: bool = False
    error_code: str | None = None
    error_message: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    processing_time_ms: int | None = None
