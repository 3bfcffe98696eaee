"""Auth middleware - verifies admin bearer tokens and sets req.context.user."""

from dataclasses import dataclass

import falcon.asgi
from loguru import logger

from grantgate.application.ports import TokenVerifier
from grantgate.domain.exceptions import GrantGateError
from grantgate.interfaces.api.errors import write_error


@dataclass
class RequestUser:
    """User from request context."""

    user_id: str
    username: str | None = None


class AuthMiddleware:
    """Requires a trusted bearer token on protected path prefixes.

    Other routes authenticate with client credentials in the request body and
    pass through untouched.
    """

    def __init__(
        self, token_verifier: TokenVerifier, protected_prefixes: tuple[str, ...] = ("/v1/admin",)
    ) -> None:
        self._verifier = token_verifier
        self._prefixes = protected_prefixes

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Reject protected requests without a trusted Authorization header."""
        req.context.user = None
        if req.method == "OPTIONS" or not req.path.startswith(self._prefixes):
            return
        auth = req.get_header("Authorization") or ""
        if not auth.startswith("Bearer "):
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized", "errorDescription": "Bearer token required"}
            resp.complete = True
            return
        try:
            trust = await self._verifier.verify(auth[7:])
        except GrantGateError as e:
            logger.warning(f"Admin request to {req.path} rejected: {e.error_code}")
            write_error(resp, e)
            resp.complete = True
            return
        req.context.user = RequestUser(user_id=trust.subject_id, username=trust.subject_name)
