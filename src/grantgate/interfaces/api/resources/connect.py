"""Intercepted identity provider token endpoints."""

import falcon
import falcon.asgi

from grantgate.application.dto.upstream import UpstreamResponse
from grantgate.application.use_cases.token.interception import (
    IntrospectionInterceptor,
    RevocationInterceptor,
)
from grantgate.domain.exceptions import GrantGateError
from grantgate.interfaces.api.errors import write_error
from grantgate.interfaces.api.request_body import read_body


async def _read_form(req: falcon.asgi.Request) -> dict[str, str] | None:
    body = await read_body(req)
    if body is None:
        return None
    return {str(k): str(v) for k, v in body.items() if v is not None}


def _relay(resp: falcon.asgi.Response, upstream: UpstreamResponse) -> None:
    resp.status = falcon.code_to_http_status(upstream.status)
    resp.data = upstream.body
    if upstream.content_type:
        resp.content_type = upstream.content_type


def _invalid(resp: falcon.asgi.Response) -> None:
    resp.status = falcon.HTTP_400
    resp.media = {"error": "invalid_request"}


class IntrospectionResource:
    """POST /connect/introspect - upstream introspection with revocation overlay."""

    def __init__(self, interceptor: IntrospectionInterceptor) -> None:
        self._interceptor = interceptor

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        form = await _read_form(req)
        if form is None:
            _invalid(resp)
            return
        try:
            upstream = await self._interceptor.introspect(form, req.get_header("Authorization"))
        except GrantGateError as e:
            write_error(resp, e)
            return
        _relay(resp, upstream)


class RevocationResource:
    """POST /connect/revocation - upstream revocation that also records the token id."""

    def __init__(self, interceptor: RevocationInterceptor) -> None:
        self._interceptor = interceptor

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        form = await _read_form(req)
        if form is None:
            _invalid(resp)
            return
        try:
            upstream = await self._interceptor.revoke(form, req.get_header("Authorization"))
        except GrantGateError as e:
            write_error(resp, e)
            return
        _relay(resp, upstream)
