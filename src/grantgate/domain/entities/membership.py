"""Group and organization membership."""

from dataclasses import dataclass

from grantgate.domain.value_objects import Subject


@dataclass(frozen=True)
class Membership:
    """Direct membership of a user in a group or organization."""

    subject: Subject
    name: str | None = None


@dataclass(frozen=True)
class Organization:
    """Organization node of the membership hierarchy."""

    id: str
    name: str
    parent_id: str | None = None
    inherit_parent_permissions: bool = True
