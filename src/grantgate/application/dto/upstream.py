"""Upstream identity provider response DTO."""

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class UpstreamResponse:
    """Status and raw body relayed from the identity provider."""

    status: int
    body: bytes
    content_type: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        return json.loads(self.body)

    @staticmethod
    def encode_json(value: Any) -> bytes:
        return json.dumps(value).encode("utf-8")
