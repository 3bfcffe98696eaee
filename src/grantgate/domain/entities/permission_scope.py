"""Permission scope reference data."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PermissionScope:
    """Scope code and its display name."""

    code: str
    name: str
    description: str | None = None
    sort_order: int = 0
