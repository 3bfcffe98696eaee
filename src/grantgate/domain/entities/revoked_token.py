"""Revoked token entity - jti blocklist entry."""

import hashlib
from dataclasses import dataclass
from datetime import datetime


def compute_jti_hash(jti: str) -> str:
    """Lower-case hex SHA-256 of the jti, indexed alongside the raw value."""
    return hashlib.sha256(jti.encode("utf-8")).hexdigest()


@dataclass
class RevokedToken:
    """Revoked token; never updated, purged after expiration_time plus a margin."""

    jti: str
    client_id: str
    subject_id: str | None = None
    token_type: str = "access_token"
    expiration_time: datetime | None = None
    revoked_at: datetime | None = None
    reason: str | None = None
    revoked_by: str | None = None
    jti_hash: str | None = None
