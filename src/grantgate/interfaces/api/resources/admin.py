"""Administrative endpoints for resources, scopes and grants."""

from uuid import UUID

import falcon
import falcon.asgi

from grantgate.application.use_cases.permission.grant_permission import GrantPermissionUseCase
from grantgate.application.use_cases.permission.resolve_permissions import (
    EffectivePermissionResolver,
)
from grantgate.application.use_cases.permission.revoke_grant import RevokeGrantUseCase
from grantgate.application.use_cases.permission.update_grant import UNSET, UpdateGrantUseCase
from grantgate.domain.entities import EffectivePermission, PermissionGrant, PermissionResource
from grantgate.domain.exceptions import GrantGateError
from grantgate.domain.resource_tree import ResourceTree
from grantgate.domain.value_objects import ScopeSet, Subject, SubjectType
from grantgate.interfaces.api.errors import write_error
from grantgate.interfaces.api.request_body import bad_request, parse_datetime, read_body


def grant_to_dict(grant: PermissionGrant) -> dict:
    return {
        "id": str(grant.id),
        "subjectType": str(grant.subject_type),
        "subjectId": grant.subject_id,
        "subjectName": grant.subject_name,
        "resourceId": str(grant.resource_id),
        "scopes": grant.scopes.serialize(),
        "inheritToChildren": grant.inherit_to_children,
        "enabled": grant.enabled,
        "expiresAt": grant.expires_at.isoformat() if grant.expires_at else None,
        "grantedBy": grant.granted_by,
        "grantedAt": grant.granted_at.isoformat(),
    }


def effective_to_dict(permission: EffectivePermission) -> dict:
    return {
        "resourceId": str(permission.resource_id),
        "resourceCode": permission.resource_code,
        "resourceName": permission.resource_name,
        "clientId": permission.client_id,
        "scopes": permission.scopes.serialize(),
        "source": str(permission.source),
        "sourceId": permission.source_id,
        "sourceName": permission.source_name,
        "provenance": [
            {
                "source": str(p.source),
                "sourceId": p.source_id,
                "sourceName": p.source_name,
                "scopes": p.scopes.serialize(),
            }
            for p in permission.provenance
        ],
    }


def _node_to_dict(tree: ResourceTree, resource: PermissionResource) -> dict:
    return {
        "id": str(resource.id),
        "code": resource.code,
        "name": resource.name,
        "resourceType": resource.resource_type,
        "sortOrder": resource.sort_order,
        "children": [_node_to_dict(tree, child) for child in tree.children_of(resource.id)],
    }


class ResourceTreeResource:
    """GET /v1/admin/resources/tree?clientId= - enabled resource forest of a client."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        client_id = req.get_param("clientId")
        if not client_id:
            bad_request(resp, "clientId is required")
            return
        try:
            async with self._uow_factory() as uow:
                tree = ResourceTree.build(await uow.resources.list_enabled(client_id))
            items = [_node_to_dict(tree, root) for root in tree.roots(client_id)]
        except GrantGateError as e:
            write_error(resp, e)
            return
        resp.media = {"clientId": client_id, "items": items}
        resp.status = falcon.HTTP_200


class ScopesResource:
    """GET /v1/admin/scopes - scope reference data."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            async with self._uow_factory() as uow:
                scopes = await uow.scopes.list_all()
        except GrantGateError as e:
            write_error(resp, e)
            return
        resp.media = {
            "items": [
                {"code": s.code, "name": s.name, "description": s.description} for s in scopes
            ]
        }
        resp.status = falcon.HTTP_200


class GrantsResource:
    """GET/POST /v1/admin/grants - list grants of a subject or resource, create grants."""

    def __init__(self, unit_of_work_factory: type, grant_permission: GrantPermissionUseCase) -> None:
        self._uow_factory = unit_of_work_factory
        self._grant = grant_permission

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        subject_type = req.get_param("subjectType")
        subject_id = req.get_param("subjectId")
        resource_id = req.get_param("resourceId")
        try:
            if subject_type and subject_id:
                subject = Subject(SubjectType(subject_type), subject_id)
                async with self._uow_factory() as uow:
                    grants = await uow.grants.list_by_subject(subject)
            elif resource_id:
                rid = UUID(resource_id)
                async with self._uow_factory() as uow:
                    grants = await uow.grants.list_by_resource(rid)
            else:
                bad_request(resp, "subjectType and subjectId, or resourceId, are required")
                return
        except ValueError as e:
            bad_request(resp, str(e))
            return
        except GrantGateError as e:
            write_error(resp, e)
            return
        resp.media = {"items": [grant_to_dict(g) for g in grants]}
        resp.status = falcon.HTTP_200

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        body = await read_body(req)
        if body is None:
            bad_request(resp, "Request body must be an object")
            return
        try:
            subject = Subject(SubjectType(body["subjectType"]), str(body["subjectId"]))
            resource_id = UUID(str(body["resourceId"]))
            scopes = ScopeSet.parse(body.get("scopes"))
            expires_at = parse_datetime(body.get("expiresAt"))
        except KeyError as e:
            bad_request(resp, f"Missing required field: {e}")
            return
        except ValueError as e:
            bad_request(resp, str(e))
            return

        try:
            grant = await self._grant.execute(
                req.context.user.user_id,
                subject,
                resource_id,
                scopes,
                subject_name=body.get("subjectName"),
                inherit_to_children=bool(body.get("inheritToChildren", False)),
                expires_at=expires_at,
            )
        except GrantGateError as e:
            write_error(resp, e)
            return
        resp.media = grant_to_dict(grant)
        resp.status = falcon.HTTP_201


class GrantResource:
    """PUT/DELETE /v1/admin/grants/{grant_id} - update or revoke one grant."""

    def __init__(self, update_grant: UpdateGrantUseCase, revoke_grant: RevokeGrantUseCase) -> None:
        self._update = update_grant
        self._revoke = revoke_grant

    async def on_put(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, grant_id: str
    ) -> None:
        body = await read_body(req)
        if body is None:
            bad_request(resp, "Request body must be an object")
            return
        try:
            gid = UUID(grant_id)
            scopes = ScopeSet.parse(body["scopes"]) if "scopes" in body else None
            inherit = body.get("inheritToChildren")
            expires_at = parse_datetime(body["expiresAt"]) if "expiresAt" in body else UNSET
        except ValueError as e:
            bad_request(resp, str(e))
            return
        try:
            grant = await self._update.execute(
                gid,
                scopes=scopes,
                inherit_to_children=bool(inherit) if inherit is not None else None,
                expires_at=expires_at,
            )
        except GrantGateError as e:
            write_error(resp, e)
            return
        resp.media = grant_to_dict(grant)
        resp.status = falcon.HTTP_200

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, grant_id: str
    ) -> None:
        try:
            gid = UUID(grant_id)
        except ValueError:
            bad_request(resp, "Invalid grant ID")
            return
        try:
            await self._revoke.execute([gid])
        except GrantGateError as e:
            write_error(resp, e)
            return
        resp.status = falcon.HTTP_204


class EffectivePermissionsResource:
    """GET /v1/admin/users/{user_id}/effective - resolved permissions with provenance."""

    def __init__(self, resolver: EffectivePermissionResolver) -> None:
        self._resolver = resolver

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        try:
            permissions = await self._resolver.resolve(user_id)
        except GrantGateError as e:
            write_error(resp, e)
            return
        resp.media = {"userId": user_id, "items": [effective_to_dict(p) for p in permissions]}
        resp.status = falcon.HTTP_200
