"""Outcome of recording a token revocation."""

from enum import StrEnum


class RevocationOutcome(StrEnum):
    """Result of an idempotent revoke call."""

    INSERTED = "Inserted"
    ALREADY_REVOKED = "AlreadyRevoked"
