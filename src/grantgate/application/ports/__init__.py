"""Application ports - interfaces for external adapters."""

from grantgate.application.ports.identity_provider import IdentityProviderClient
from grantgate.application.ports.token_trust import (
    ClientAuthenticator,
    RevocationChecker,
    SigningKeyProvider,
    TokenVerifier,
)
from grantgate.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "ClientAuthenticator",
    "IdentityProviderClient",
    "RevocationChecker",
    "SigningKeyProvider",
    "TokenVerifier",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
