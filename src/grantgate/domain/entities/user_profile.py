"""User profile as known to the identity store."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserProfile:
    """Display data for a token subject."""

    subject_id: str
    user_name: str | None = None
    display_name: str | None = None
    english_name: str | None = None
