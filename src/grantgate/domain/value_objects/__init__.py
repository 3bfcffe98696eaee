"""Domain value objects."""

from grantgate.domain.value_objects.revocation_outcome import RevocationOutcome
from grantgate.domain.value_objects.scope_set import (
    STANDARD_SCOPES,
    WILDCARD_SCOPE,
    ScopeSet,
    requested_scope_codes,
)
from grantgate.domain.value_objects.subject import PermissionSource, Subject, SubjectType

__all__ = [
    "STANDARD_SCOPES",
    "WILDCARD_SCOPE",
    "PermissionSource",
    "RevocationOutcome",
    "ScopeSet",
    "Subject",
    "SubjectType",
    "requested_scope_codes",
]
