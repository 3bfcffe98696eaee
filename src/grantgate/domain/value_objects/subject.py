"""Subject of a permission grant."""

from dataclasses import dataclass
from enum import StrEnum


class SubjectType(StrEnum):
    """Kinds of subject a grant can be attached to."""

    USER = "User"
    GROUP = "Group"
    ORGANIZATION = "Organization"
    ROLE = "Role"


class PermissionSource(StrEnum):
    """Where an effective permission came from."""

    DIRECT = "Direct"
    GROUP = "Group"
    ORGANIZATION = "Organization"

    @classmethod
    def for_subject(cls, subject_type: SubjectType) -> "PermissionSource":
        match subject_type:
            case SubjectType.USER:
                return cls.DIRECT
            case SubjectType.GROUP:
                return cls.GROUP
            case SubjectType.ORGANIZATION:
                return cls.ORGANIZATION
            case SubjectType.ROLE:
                raise ValueError("Role grants are not resolved into effective permissions")
        raise ValueError(f"Unknown subject type: {subject_type}")


@dataclass(frozen=True)
class Subject:
    """Subject identified by (type, id)."""

    type: SubjectType
    id: str

    def __str__(self) -> str:
        return f"{self.type}:{self.id}"
