"""Registered OAuth client allowed to query permissions."""

from dataclasses import dataclass, field


@dataclass
class RegisteredClient:
    """Client with its stored secrets (base64 SHA-256/SHA-512 digests)."""

    client_id: str
    client_name: str | None = None
    enabled: bool = True
    secrets: list[str] = field(default_factory=list)
