"""
In-memory repository adapter - Implements UserDirectory protocol.

Keeps users in process memory behind a single lock. Uniqueness of
username and email is checked and the row inserted under that lock, so
concurrent duplicate creates behave like the database UNIQUE constraint:
exactly one wins.

Used for local runs without PostgreSQL and for workflow tests.
"""

import threading
import uuid
from dataclasses import replace
from datetime import UTC, datetime

from src.domain.exceptions import ConflictError, NotFoundError
from src.domain.user import PendingUser, User


class InMemoryUserDirectory:
    """
    Implements UserDirectory protocol with a dict keyed by public_id.

    Returned users are copies; callers must go through update() to change
    stored state.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: dict[str, User] = {}

    def exists_by_username_or_email(self, username: str, email: str) -> bool:
        with self._lock:
            return any(u.username == username or u.email == email for u in self._users.values())

    def create(self, pending_user: PendingUser) -> User:
        now = datetime.now(UTC)
        with self._lock:
            for existing in self._users.values():
                if existing.username == pending_user.username or existing.email == pending_user.email:
                    raise ConflictError(pending_user.username)

            user = User(
                public_id=str(uuid.uuid4()),
                username=pending_user.username,
                email=pending_user.email,
                password_hash=pending_user.password_hash,
                enabled=False,
                verification_token=pending_user.verification_token,
                created_at=now,
                updated_at=now,
            )
            self._users[user.public_id] = user
            return replace(user)

    def find_by_username(self, username: str) -> User | None:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return replace(user)
        return None

    def find_by_public_id(self, public_id: str) -> User | None:
        with self._lock:
            user = self._users.get(public_id)
            return replace(user) if user is not None else None

    def update(self, user: User) -> User:
        with self._lock:
            stored = self._users.get(user.public_id)
            if stored is None:
                raise NotFoundError(user.public_id)
            for other in self._users.values():
                if other.public_id != user.public_id and other.email == user.email:
                    raise ConflictError(user.email)

            updated = replace(
                stored,
                email=user.email,
                password_hash=user.password_hash,
                enabled=user.enabled,
                verification_token=user.verification_token,
                updated_at=datetime.now(UTC),
            )
            self._users[user.public_id] = updated
            return replace(updated)

    def list_users(self, limit: int, offset: int) -> list[User]:
        with self._lock:
            ordered = sorted(self._users.values(), key=lambda u: (u.created_at, u.username))
            return [replace(u) for u in ordered[offset : offset + limit]]

    def count_users(self) -> int:
        with self._lock:
            return len(self._users)

    def delete(self, public_id: str) -> bool:
        with self._lock:
            return self._users.pop(public_id, None) is not None
