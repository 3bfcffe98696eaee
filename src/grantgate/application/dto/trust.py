"""Token trust DTOs."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import jwt


@dataclass(frozen=True)
class KeySetSnapshot:
    """Signing keys of one fetch; replaced as a whole, never mutated."""

    keys: jwt.PyJWKSet
    issuer: str
    fetched_at: datetime

    def find(self, kid: str | None) -> jwt.PyJWK | None:
        """Key for kid; a kid-less token matches only a single-key set."""
        if kid is None:
            return self.keys.keys[0] if len(self.keys.keys) == 1 else None
        for key in self.keys.keys:
            if key.key_id == kid:
                return key
        return None


@dataclass(frozen=True)
class TrustResult:
    """Claims of a verified token."""

    subject_id: str
    subject_name: str | None
    client_id: str | None
    jti: str | None
    expires_at: datetime
    claims: dict[str, Any] = field(default_factory=dict)
