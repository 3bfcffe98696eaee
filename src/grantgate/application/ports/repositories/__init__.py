"""Repository ports."""

from grantgate.application.ports.repositories.check_log_repository import (
    CheckLogRepository,
)
from grantgate.application.ports.repositories.client_repository import ClientRepository
from grantgate.application.ports.repositories.grant_repository import GrantRepository
from grantgate.application.ports.repositories.membership_repository import (
    MembershipRepository,
)
from grantgate.application.ports.repositories.resource_repository import (
    ResourceRepository,
)
from grantgate.application.ports.repositories.revoked_token_repository import (
    RevokedTokenRepository,
)
from grantgate.application.ports.repositories.scope_repository import ScopeRepository
from grantgate.application.ports.repositories.user_repository import UserRepository

__all__ = [
    "CheckLogRepository",
    "ClientRepository",
    "GrantRepository",
    "MembershipRepository",
    "ResourceRepository",
    "RevokedTokenRepository",
    "ScopeRepository",
    "UserRepository",
]
