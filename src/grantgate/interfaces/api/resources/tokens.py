"""Revoked token administration endpoints."""

import falcon
import falcon.asgi

from grantgate.application.use_cases.token.revocation_registry import RevocationRegistry
from grantgate.domain.entities import RevokedToken
from grantgate.domain.exceptions import GrantGateError
from grantgate.domain.value_objects import RevocationOutcome
from grantgate.interfaces.api.errors import write_error
from grantgate.interfaces.api.request_body import bad_request, parse_datetime, read_body


def revoked_to_dict(token: RevokedToken) -> dict:
    return {
        "jti": token.jti,
        "clientId": token.client_id,
        "subjectId": token.subject_id,
        "tokenType": token.token_type,
        "expirationTime": token.expiration_time.isoformat() if token.expiration_time else None,
        "revokedAt": token.revoked_at.isoformat() if token.revoked_at else None,
        "reason": token.reason,
        "revokedBy": token.revoked_by,
    }


class RevokedTokensResource:
    """GET /v1/admin/tokens/revoked - paged list of revocations."""

    def __init__(self, registry: RevocationRegistry) -> None:
        self._registry = registry

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        page = req.get_param_as_int("page") or 1
        page_size = req.get_param_as_int("pageSize") or 20
        try:
            items, total = await self._registry.list_revoked(
                page=page,
                page_size=page_size,
                subject_id=req.get_param("subjectId"),
                client_id=req.get_param("clientId"),
            )
        except GrantGateError as e:
            write_error(resp, e)
            return
        resp.media = {"items": [revoked_to_dict(t) for t in items], "total": total, "page": page}
        resp.status = falcon.HTTP_200


class RevokedTokenResource:
    """GET /v1/admin/tokens/revoked/{jti} - one revocation."""

    def __init__(self, registry: RevocationRegistry) -> None:
        self._registry = registry

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response, jti: str) -> None:
        try:
            token = await self._registry.get(jti)
        except GrantGateError as e:
            write_error(resp, e)
            return
        if not token:
            resp.status = falcon.HTTP_404
            resp.media = {"error": "NotFound", "errorDescription": "Token is not revoked"}
            return
        resp.media = revoked_to_dict(token)
        resp.status = falcon.HTTP_200


class TokenRevokeResource:
    """POST /v1/admin/tokens/revoke - force revocation of a token id."""

    def __init__(self, registry: RevocationRegistry) -> None:
        self._registry = registry

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        body = await read_body(req)
        if body is None or not body.get("jti") or not body.get("clientId"):
            bad_request(resp, "jti and clientId are required")
            return
        try:
            expiration = parse_datetime(body.get("expirationTime"))
        except ValueError as e:
            bad_request(resp, str(e))
            return
        try:
            outcome = await self._registry.revoke(
                RevokedToken(
                    jti=str(body["jti"]),
                    client_id=str(body["clientId"]),
                    subject_id=body.get("subjectId"),
                    token_type=body.get("tokenType") or "access_token",
                    expiration_time=expiration,
                    reason=body.get("reason") or "Revoked by administrator",
                    revoked_by=req.context.user.user_id,
                )
            )
        except GrantGateError as e:
            write_error(resp, e)
            return
        resp.media = {"jti": body["jti"], "outcome": str(outcome)}
        resp.status = (
            falcon.HTTP_201 if outcome == RevocationOutcome.INSERTED else falcon.HTTP_200
        )


class RevocationCleanupResource:
    """POST /v1/admin/tokens/cleanup - purge revocations of long-expired tokens."""

    def __init__(self, registry: RevocationRegistry) -> None:
        self._registry = registry

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            deleted = await self._registry.cleanup_expired()
        except GrantGateError as e:
            write_error(resp, e)
            return
        resp.media = {"deleted": deleted}
        resp.status = falcon.HTTP_200
