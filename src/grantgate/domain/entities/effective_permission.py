"""Effective permission - resolved scopes a user holds on a resource."""

from dataclasses import dataclass
from uuid import UUID

from grantgate.domain.value_objects import PermissionSource, ScopeSet


@dataclass(frozen=True)
class PermissionProvenance:
    """One source contributing scopes to an effective permission."""

    source: PermissionSource
    source_id: str
    source_name: str | None
    scopes: ScopeSet


@dataclass(frozen=True)
class EffectivePermission:
    """Merged scopes on a resource; source fields describe the first contributor."""

    resource_id: UUID
    resource_code: str
    scopes: ScopeSet
    source: PermissionSource
    source_id: str
    source_name: str | None
    provenance: tuple[PermissionProvenance, ...]
    resource_name: str | None = None
    client_id: str | None = None
    client_name: str | None = None
