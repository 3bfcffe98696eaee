"""Request body helpers shared by resources."""

from datetime import datetime

import falcon
import falcon.asgi


async def read_body(req: falcon.asgi.Request) -> dict | None:
    """JSON or form body as a dict; None when it is not an object."""
    try:
        body = await req.get_media(default_when_empty={})
    except falcon.MediaMalformedError:
        return None
    return body if isinstance(body, dict) else None


def parse_datetime(value: object) -> datetime | None:
    """Offset-aware ISO 8601 timestamp, or None for a missing value."""
    if value in (None, ""):
        return None
    if not isinstance(value, str):
        raise ValueError("expected an ISO 8601 timestamp")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        raise ValueError("timestamp must carry a UTC offset")
    return parsed


def bad_request(resp: falcon.asgi.Response, message: str) -> None:
    resp.status = falcon.HTTP_400
    resp.media = {"error": "InvalidRequest", "errorDescription": message}
