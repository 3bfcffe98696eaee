"""Permission query and check service - the externally callable surface."""

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from loguru import logger

from grantgate.application.dto.permission_query import (
    CheckPermissionRequest,
    PermissionCheckResult,
    PermissionsQueryResult,
    QueryPermissionsRequest,
    ResourcePermissions,
    ScopeDecision,
    ScopeView,
    ServiceError,
    SystemPermissions,
)
from grantgate.application.dto.trust import TrustResult
from grantgate.application.ports import ClientAuthenticator, TokenVerifier
from grantgate.application.use_cases.permission.resolve_permissions import (
    EffectivePermissionResolver,
)
from grantgate.domain.entities import (
    EffectivePermission,
    PermissionCheckLog,
    RegisteredClient,
    UserProfile,
)
from grantgate.domain.exceptions import (
    GrantGateError,
    InvalidClient,
    InvalidRequest,
    InvalidToken,
    TokenExpired,
    TokenRevoked,
    UserNotFound,
)
from grantgate.domain.resource_tree import ResourceTree
from grantgate.domain.value_objects import STANDARD_SCOPES, requested_scope_codes

_SERVER_ERROR = ServiceError("ServerError", "An internal error occurred")
_REJECTIONS = (InvalidClient, InvalidToken, TokenExpired, TokenRevoked)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _service_error(exc: GrantGateError) -> ServiceError:
    return ServiceError(exc.error_code, exc.description, exc.retryable)


def _require(**fields: str | None) -> None:
    missing = [
        name for name, value in fields.items() if not isinstance(value, str) or not value.strip()
    ]
    if missing:
        raise InvalidRequest(f"Missing required parameter(s): {', '.join(missing)}")


@dataclass
class _CheckAudit:
    subject_id: str | None = None
    user_name: str | None = None
    granted: str | None = None


class PermissionQueryService:
    """Answers queryPermissions and checkPermission for downstream clients.

    Both calls authenticate the client, verify the access token and resolve
    permissions fresh. Failures never escape: they come back as a structured
    error on the result.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        client_authenticator: ClientAuthenticator,
        token_verifier: TokenVerifier,
        resolver: EffectivePermissionResolver,
        standard_scopes: Sequence[str] = STANDARD_SCOPES,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._clients = client_authenticator
        self._verifier = token_verifier
        self._resolver = resolver
        self._standard_scopes = tuple(standard_scopes)
        self._clock = clock

    async def query_permissions(self, request: QueryPermissionsRequest) -> PermissionsQueryResult:
        try:
            return await self._query(request)
        except GrantGateError as e:
            self._log_failure("queryPermissions", request.client_id, e)
            return PermissionsQueryResult(error=_service_error(e))
        except Exception:
            logger.exception("Unexpected error in queryPermissions")
            return PermissionsQueryResult(error=_SERVER_ERROR)

    async def check_permission(self, request: CheckPermissionRequest) -> PermissionCheckResult:
        codes = requested_scope_codes(request.scopes, default=self._standard_scopes)
        audit = _CheckAudit()
        started = time.perf_counter()
        try:
            allowed = await self._check(request, codes, audit)
            result = PermissionCheckResult(
                {code: ScopeDecision(allowed.get(code, False)) for code in codes}
            )
        except GrantGateError as e:
            self._log_failure("checkPermission", request.client_id, e)
            result = self._failed_check(codes, _service_error(e))
        except Exception:
            logger.exception("Unexpected error in checkPermission")
            result = self._failed_check(codes, _SERVER_ERROR)
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        await self._write_check_log(request, codes, result, audit, elapsed_ms)
        return result

    async def _authenticate(
        self,
        client_id: str | None,
        client_secret: str | None,
        id_token: str | None,
        access_token: str | None,
    ) -> tuple[RegisteredClient, TrustResult]:
        _require(
            clientId=client_id,
            clientSecret=client_secret,
            idToken=id_token,
            accessToken=access_token,
        )
        client = await self._clients.authenticate(client_id, client_secret)
        trust = await self._verifier.verify(access_token)
        return client, trust

    async def _query(self, request: QueryPermissionsRequest) -> PermissionsQueryResult:
        _, trust = await self._authenticate(
            request.client_id, request.client_secret, request.id_token, request.access_token
        )
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_subject_id(trust.subject_id)
            if not user:
                raise UserNotFound(trust.subject_id)
            tree = ResourceTree.build(await uow.resources.list_enabled())
            permissions = await self._resolver.resolve_in(uow, tree, trust.subject_id)
            scope_names = {scope.code: scope.name for scope in await uow.scopes.list_all()}

        if request.system_id:
            permissions = [p for p in permissions if p.client_id == request.system_id]
        result = PermissionsQueryResult(
            user_id=user.subject_id,
            user_name=user.user_name or trust.subject_name,
            user_english_name=user.english_name,
            permissions=self._group_by_system(permissions, scope_names),
        )
        logger.info(
            f"queryPermissions for {trust.subject_id} by {request.client_id}:"
            f" {len(permissions)} resource(s)"
        )
        return result

    async def _check(
        self, request: CheckPermissionRequest, codes: list[str], audit: _CheckAudit
    ) -> dict[str, bool]:
        _require(resource=request.resource)
        client, trust = await self._authenticate(
            request.client_id, request.client_secret, request.id_token, request.access_token
        )
        audit.subject_id = trust.subject_id
        user = await self._get_user(trust.subject_id)
        audit.user_name = user.user_name or trust.subject_name
        allowed = await self._resolver.check(
            trust.subject_id, client.client_id, request.resource.strip(), codes
        )
        audit.granted = "".join(f"@{code}" for code, ok in allowed.items() if ok)
        return allowed

    async def _get_user(self, subject_id: str) -> UserProfile:
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_subject_id(subject_id)
        if not user:
            raise UserNotFound(subject_id)
        return user

    @staticmethod
    def _group_by_system(
        permissions: list[EffectivePermission], scope_names: dict[str, str]
    ) -> list[SystemPermissions]:
        systems: dict[str, SystemPermissions] = {}
        for permission in permissions:
            system_id = permission.client_id or ""
            system = systems.get(system_id)
            if system is None:
                system = systems[system_id] = SystemPermissions(
                    system_id, permission.client_name, []
                )
            system.resources.append(
                ResourcePermissions(
                    resource_id=permission.resource_id,
                    resource_code=permission.resource_code,
                    resource_name=permission.resource_name,
                    scopes=[
                        ScopeView(code, scope_names.get(code, code))
                        for code in sorted(permission.scopes.codes)
                    ],
                )
            )
        grouped = sorted(systems.values(), key=lambda s: s.system_id)
        for system in grouped:
            system.resources.sort(key=lambda r: r.resource_code)
        return grouped

    @staticmethod
    def _failed_check(codes: list[str], error: ServiceError) -> PermissionCheckResult:
        return PermissionCheckResult(
            {code: ScopeDecision(False, error.error, error.error_description) for code in codes},
            error=error,
        )

    @staticmethod
    def _log_failure(operation: str, client_id: str | None, exc: GrantGateError) -> None:
        if isinstance(exc, _REJECTIONS):
            logger.warning(f"{operation} rejected for client {client_id}: {exc.error_code}")
        elif exc.retryable:
            logger.error(f"{operation} failed for client {client_id}: {exc.error_code}")
        else:
            logger.info(f"{operation} for client {client_id}: {exc.error_code} {exc.description}")

    async def _write_check_log(
        self,
        request: CheckPermissionRequest,
        codes: list[str],
        result: PermissionCheckResult,
        audit: _CheckAudit,
        elapsed_ms: int,
    ) -> None:
        entry = PermissionCheckLog(
            id=uuid4(),
            checked_at=self._clock(),
            client_id=request.client_id or "",
            resource=request.resource or "",
            requested_scopes="".join(f"@{code}" for code in codes),
            subject_id=audit.subject_id,
            user_name=audit.user_name,
            granted_scopes=audit.granted,
            allowed=(
                result.error is None
                and bool(result.decisions)
                and all(d.allowed for d in result.decisions.values())
            ),
            success=result.error is None,
            error_code=result.error.error if result.error else None,
            error_message=result.error.error_description if result.error else None,
            ip_address=request.ip_address,
            user_agent=request.user_agent,
            processing_time_ms=elapsed_ms,
        )
        try:
            async with self._uow_factory() as uow:
                await uow.check_logs.add(entry)
        except Exception:
            logger.exception("Failed to write permission check log")
