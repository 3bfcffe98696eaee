"""Permission query and check DTOs."""

from dataclasses import dataclass, field
from uuid import UUID


@dataclass
class QueryPermissionsRequest:
    """Input of queryPermissions."""

    client_id: str | None
    client_secret: str | None
    id_token: str | None
    access_token: str | None
    system_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass
class CheckPermissionRequest:
    """Input of checkPermission; scopes is the raw requested value."""

    client_id: str | None
    client_secret: str | None
    id_token: str | None
    access_token: str | None
    resource: str | None
    scopes: object = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass
class ScopeView:
    code: str
    name: str


@dataclass
class ResourcePermissions:
    resource_id: UUID
    resource_code: str
    resource_name: str | None
    scopes: list[ScopeView]


@dataclass
class SystemPermissions:
    """Resources of one system (client application)."""

    system_id: str
    system_name: str | None
    resources: list[ResourcePermissions]


@dataclass
class ServiceError:
    """Structured error crossing the service boundary."""

    error: str
    error_description: str
    retryable: bool = False


@dataclass
class PermissionsQueryResult:
    """Output of queryPermissions; either permissions or an error."""

    user_id: str | None = None
    user_name: str | None = None
    user_english_name: str | None = None
    permissions: list[SystemPermissions] = field(default_factory=list)
    error: ServiceError | None = None


@dataclass
class ScopeDecision:
    allowed: bool
    error: str | None = None
    error_description: str | None = None


@dataclass
class PermissionCheckResult:
    """Output of checkPermission, keyed by requested scope code."""

    decisions: dict[str, ScopeDecision]
    error: ServiceError | None = None
