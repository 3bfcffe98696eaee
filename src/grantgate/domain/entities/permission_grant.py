"""Permission grant entity - subject holds scopes on a resource."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from grantgate.domain.value_objects import ScopeSet, Subject, SubjectType


@dataclass
class PermissionGrant:
    """Grant - subject has scopes on resource, optionally inherited by descendants."""

    id: UUID
    subject_type: SubjectType
    subject_id: str
    resource_id: UUID
    scopes: ScopeSet
    granted_at: datetime
    subject_name: str | None = None
    inherit_to_children: bool = False
    enabled: bool = True
    expires_at: datetime | None = None
    granted_by: str | None = None

    @property
    def subject(self) -> Subject:
        return Subject(self.subject_type, self.subject_id)

    def is_active(self, now: datetime) -> bool:
        """Enabled and not past its expiry."""
        return self.enabled and (self.expires_at is None or self.expires_at > now)
