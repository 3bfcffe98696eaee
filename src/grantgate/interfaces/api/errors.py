"""Mapping of domain errors to HTTP responses."""

import falcon
import falcon.asgi

from grantgate.domain.exceptions import GrantGateError

STATUS_BY_ERROR_CODE = {
    "InvalidRequest": falcon.HTTP_400,
    "InvalidClient": falcon.HTTP_401,
    "InvalidToken": falcon.HTTP_401,
    "TokenExpired": falcon.HTTP_401,
    "TokenRevoked": falcon.HTTP_401,
    "NotFound": falcon.HTTP_404,
    "UserNotFound": falcon.HTTP_404,
    "ResourceUnknown": falcon.HTTP_404,
    "StorageUnavailable": falcon.HTTP_503,
    "KeySetUnavailable": falcon.HTTP_503,
}


def status_for(error_code: str) -> str:
    return STATUS_BY_ERROR_CODE.get(error_code, falcon.HTTP_500)


def write_error(resp: falcon.asgi.Response, exc: GrantGateError) -> None:
    """Same-shaped error body for every failure."""
    resp.status = status_for(exc.error_code)
    resp.media = {"error": exc.error_code, "errorDescription": exc.description}
