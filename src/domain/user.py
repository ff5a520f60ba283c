"""
User records as seen by the sign-up flow.

These are plain dataclasses; persistence adapters map them to and from rows.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class PendingUser:
    """Values needed to create a user that has not been verified yet."""

    username: str
    email: str
    password_hash: str
    verification_token: str


@dataclass
class User:
    """
    Identity record.

    public_id is the only identifier exposed outside the service.
    verification_token holds the outstanding token and is cleared once consumed.
    """

    public_id: str
    username: str
    email: str
    password_hash: str
    enabled: bool = False
    verification_token: str | None = None
    created_at: datetime | None = field(default=None, compare=False)
    updated_at: datetime | None = field(default=None, compare=False)
