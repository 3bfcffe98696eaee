"""Domain entities."""

from grantgate.domain.entities.effective_permission import (
    EffectivePermission,
    PermissionProvenance,
)
from grantgate.domain.entities.membership import Membership, Organization
from grantgate.domain.entities.permission_check_log import PermissionCheckLog
from grantgate.domain.entities.permission_grant import PermissionGrant
from grantgate.domain.entities.permission_resource import PermissionResource
from grantgate.domain.entities.permission_scope import PermissionScope
from grantgate.domain.entities.registered_client import RegisteredClient
from grantgate.domain.entities.revoked_token import RevokedToken, compute_jti_hash
from grantgate.domain.entities.user_profile import UserProfile

__all__ = [
    "EffectivePermission",
    "Membership",
    "Organization",
    "PermissionCheckLog",
    "PermissionGrant",
    "PermissionProvenance",
    "PermissionResource",
    "PermissionScope",
    "RegisteredClient",
    "RevokedToken",
    "UserProfile",
    "compute_jti_hash",
]
