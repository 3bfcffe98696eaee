"""Application entry point and composition root."""

import sys
from datetime import timedelta

import falcon
import falcon.asgi
from loguru import logger

from grantgate import __version__
from grantgate.application.ports import IdentityProviderClient, SigningKeyProvider
from grantgate.application.use_cases.permission.grant_permission import GrantPermissionUseCase
from grantgate.application.use_cases.permission.resolve_permissions import (
    EffectivePermissionResolver,
)
from grantgate.application.use_cases.permission.revoke_grant import RevokeGrantUseCase
from grantgate.application.use_cases.permission.update_grant import UpdateGrantUseCase
from grantgate.application.use_cases.query.permission_query import PermissionQueryService
from grantgate.application.use_cases.token.interception import (
    IntrospectionInterceptor,
    RevocationInterceptor,
)
from grantgate.application.use_cases.token.revocation_registry import RevocationRegistry
from grantgate.config import Settings, get_settings, split_csv
from grantgate.infrastructure.auth.client_authenticator import ClientCredentialsAuthenticator
from grantgate.infrastructure.auth.idp_client import HttpIdentityProviderClient
from grantgate.infrastructure.auth.jwks_cache import HttpKeySetFetcher, SigningKeyCache
from grantgate.infrastructure.auth.token_verifier import TokenTrustVerifier
from grantgate.infrastructure.persistence.postgres.connection import create_pool
from grantgate.infrastructure.persistence.postgres.unit_of_work import create_uow_factory
from grantgate.interfaces.api.middleware.auth import AuthMiddleware
from grantgate.interfaces.api.middleware.cors import CORSMiddleware
from grantgate.interfaces.api.middleware.pool_lifespan import PoolLifespanMiddleware
from grantgate.interfaces.api.resources.admin import (
    EffectivePermissionsResource,
    GrantResource,
    GrantsResource,
    ResourceTreeResource,
    ScopesResource,
)
from grantgate.interfaces.api.resources.connect import IntrospectionResource, RevocationResource
from grantgate.interfaces.api.resources.health import HealthResource
from grantgate.interfaces.api.resources.permission_query import (
    PermissionCheckResource,
    PermissionQueryResource,
)
from grantgate.interfaces.api.resources.tokens import (
    RevocationCleanupResource,
    RevokedTokenResource,
    RevokedTokensResource,
    TokenRevokeResource,
)


def configure_logging(settings: Settings) -> None:
    """Single stderr sink at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if settings.debug else settings.log_level.upper(),
        backtrace=settings.debug,
        diagnose=settings.debug,
    )


async def handle_unexpected(req, resp, ex, params) -> None:
    """Log anything a resource did not handle and answer with a generic 500."""
    logger.opt(exception=ex).error(f"Unhandled error on {req.method} {req.path}")
    resp.status = falcon.HTTP_500
    resp.media = {"error": "ServerError", "errorDescription": "An internal error occurred"}


def create_grantgate_app(
    settings: Settings | None = None,
    uow_factory=None,
    key_provider: SigningKeyProvider | None = None,
    identity_provider: IdentityProviderClient | None = None,
):
    """Composition root - build Falcon app with all dependencies.

    Passing ``uow_factory`` skips the PostgreSQL pool entirely.
    """
    settings = settings or get_settings()
    configure_logging(settings)
    pool = None
    if uow_factory is None:
        pool = create_pool(
            settings.database_url,
            min_size=settings.database_pool_min_size,
            max_size=settings.database_pool_max_size,
            timeout=settings.database_timeout_seconds,
            statement_timeout_ms=settings.database_statement_timeout_ms,
        )
        uow_factory = create_uow_factory(pool)

    standard_scopes = split_csv(settings.standard_scopes)
    registry = RevocationRegistry(
        uow_factory,
        cleanup_margin=timedelta(days=settings.revocation_cleanup_margin_days),
    )
    key_provider = key_provider or SigningKeyCache(
        HttpKeySetFetcher(
            settings.oidc_authority,
            jwks_url=settings.oidc_jwks_url,
            timeout=settings.http_timeout_seconds,
        ),
        lifetime=timedelta(minutes=settings.jwks_cache_minutes),
        min_refresh_interval=timedelta(seconds=settings.jwks_min_refresh_seconds),
    )
    verifier = TokenTrustVerifier(
        key_provider,
        registry,
        audiences=split_csv(settings.oidc_valid_audiences),
    )
    authenticator = ClientCredentialsAuthenticator(
        uow_factory, allow_plaintext=settings.allow_plaintext_client_secrets
    )
    resolver = EffectivePermissionResolver(uow_factory, standard_scopes=standard_scopes)
    query_service = PermissionQueryService(
        uow_factory,
        authenticator,
        verifier,
        resolver,
        standard_scopes=standard_scopes,
    )
    identity_provider = identity_provider or HttpIdentityProviderClient(
        settings.introspection_url,
        settings.revocation_url,
        timeout=settings.http_timeout_seconds,
    )

    middleware = [CORSMiddleware(split_csv(settings.cors_origins))]
    if pool is not None:
        middleware.append(PoolLifespanMiddleware(pool, key_provider))
    middleware.append(AuthMiddleware(verifier))
    app = falcon.asgi.App(middleware=middleware)
    app.add_error_handler(Exception, handle_unexpected)

    health_resource = HealthResource(uow_factory)
    app.add_route("/v1/health", health_resource)
    app.add_route("/v1/health/ready", health_resource, suffix="ready")
    app.add_route("/v1/permissions/query", PermissionQueryResource(query_service))
    app.add_route("/v1/permissions/check", PermissionCheckResource(query_service))
    app.add_route("/v1/admin/resources/tree", ResourceTreeResource(uow_factory))
    app.add_route("/v1/admin/scopes", ScopesResource(uow_factory))
    app.add_route(
        "/v1/admin/grants",
        GrantsResource(uow_factory, GrantPermissionUseCase(uow_factory)),
    )
    app.add_route(
        "/v1/admin/grants/{grant_id}",
        GrantResource(UpdateGrantUseCase(uow_factory), RevokeGrantUseCase(uow_factory)),
    )
    app.add_route("/v1/admin/users/{user_id}/effective", EffectivePermissionsResource(resolver))
    app.add_route("/v1/admin/tokens/revoked", RevokedTokensResource(registry))
    app.add_route("/v1/admin/tokens/revoked/{jti}", RevokedTokenResource(registry))
    app.add_route("/v1/admin/tokens/revoke", TokenRevokeResource(registry))
    app.add_route("/v1/admin/tokens/cleanup", RevocationCleanupResource(registry))
    app.add_route(
        "/connect/introspect",
        IntrospectionResource(IntrospectionInterceptor(identity_provider, registry)),
    )
    app.add_route(
        "/connect/revocation",
        RevocationResource(RevocationInterceptor(identity_provider, registry)),
    )

    logger.info(f"grantgate v{__version__} configured ({settings.environment})")
    return app


def run_server() -> None:
    """Run uvicorn server."""
    import uvicorn

    uvicorn.run(create_grantgate_app(), host="0.0.0.0", port=8000)
