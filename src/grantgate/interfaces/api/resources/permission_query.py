"""Permission query and check endpoints for downstream clients."""

import falcon
import falcon.asgi

from grantgate.application.dto.permission_query import (
    CheckPermissionRequest,
    PermissionCheckResult,
    PermissionsQueryResult,
    QueryPermissionsRequest,
)
from grantgate.application.use_cases.query.permission_query import PermissionQueryService
from grantgate.interfaces.api.errors import status_for
from grantgate.interfaces.api.request_body import bad_request, read_body


def query_result_to_dict(result: PermissionsQueryResult) -> dict:
    return {
        "userId": result.user_id,
        "userName": result.user_name,
        "userEnglishName": result.user_english_name,
        "permissions": [
            {
                "systemId": system.system_id,
                "systemName": system.system_name,
                "resources": [
                    {
                        "resourceId": str(resource.resource_id),
                        "resourceCode": resource.resource_code,
                        "resourceName": resource.resource_name,
                        "scopes": [{"code": s.code, "name": s.name} for s in resource.scopes],
                    }
                    for resource in system.resources
                ],
            }
            for system in result.permissions
        ],
    }


def check_result_to_dict(result: PermissionCheckResult) -> dict:
    body = {}
    for code, decision in result.decisions.items():
        entry: dict = {"allowed": decision.allowed}
        if decision.error:
            entry["error"] = decision.error
            entry["errorDescription"] = decision.error_description
        body[code] = entry
    return body


class PermissionQueryResource:
    """POST /v1/permissions/query - everything the token holder may do."""

    def __init__(self, service: PermissionQueryService) -> None:
        self._service = service

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        body = await read_body(req)
        if body is None:
            bad_request(resp, "Request body must be an object")
            return
        result = await self._service.query_permissions(
            QueryPermissionsRequest(
                client_id=body.get("clientId"),
                client_secret=body.get("clientSecret"),
                id_token=body.get("idToken"),
                access_token=body.get("accessToken"),
                system_id=body.get("systemId") or None,
                ip_address=req.remote_addr,
                user_agent=req.user_agent,
            )
        )
        if result.error:
            resp.status = status_for(result.error.error)
            resp.media = {
                "error": result.error.error,
                "errorDescription": result.error.error_description,
            }
            return
        resp.media = query_result_to_dict(result)
        resp.status = falcon.HTTP_200


class PermissionCheckResource:
    """POST /v1/permissions/check - may the token holder do these scopes on a resource."""

    def __init__(self, service: PermissionQueryService) -> None:
        self._service = service

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        body = await read_body(req)
        if body is None:
            bad_request(resp, "Request body must be an object")
            return
        result = await self._service.check_permission(
            CheckPermissionRequest(
                client_id=body.get("clientId"),
                client_secret=body.get("clientSecret"),
                id_token=body.get("idToken"),
                access_token=body.get("accessToken"),
                resource=body.get("resource"),
                scopes=body.get("scopes"),
                ip_address=req.remote_addr,
                user_agent=req.user_agent,
            )
        )
        resp.media = check_result_to_dict(result)
        resp.status = status_for(result.error.error) if result.error else falcon.HTTP_200
