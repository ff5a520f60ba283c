"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from enum import Enum
from typing import Any, Protocol

from .user import PendingUser, User


class SignUpState(str, Enum):
    """
    Sign-up workflow states.

    State Transitions (forward-only):
    - REQUESTED -> PENDING_VERIFICATION (user stored, verification email sent)
    - REQUESTED -> REJECTED (invalid input or username/email conflict)
    - PENDING_VERIFICATION -> VERIFIED (valid, current token presented)
    - PENDING_VERIFICATION -> REJECTED (invalid, stale or unknown token)

    Terminal States:
    - VERIFIED: Account enabled, token consumed
    - REJECTED: Request refused; a new registration starts again at REQUESTED
    """

    REQUESTED = "REQUESTED"
    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class VerifyResult(Enum):
    """
    Result of a verification callback.

    Used by SignUpService.verify() to indicate success or the specific
    rejection reason. Reasons stay distinguishable inside the service;
    the HTTP layer decides how much of it to reveal.
    """

    SUCCESS = "success"
    INVALID_TOKEN = "invalid_token"
    NOT_FOUND = "not_found"
    STALE_TOKEN = "stale_token"
    ALREADY_VERIFIED = "already_verified"


class TokenCodec(Protocol):
    """Port interface for signed, time-bounded verification tokens."""

    def issue(self, username: str) -> str:
        """Create a new token bound to username."""
        ...

    def validate(self, token: str) -> bool:
        """True iff the signature verifies and the token has not expired."""
        ...

    def claims(self, token: str) -> dict[str, Any]:
        """
        Verify the token and return its claims.

        Raises:
            ExpiredTokenError: expiry has passed
            InvalidSignatureError: signature does not match
            MalformedTokenError: token cannot be parsed
        """
        ...

    def subject_of(self, token: str) -> str:
        """
        Extract the bound username without checking signature or expiry.

        Raises:
            MalformedTokenError: token cannot be parsed or has no subject
        """
        ...


class ReversibleCipher(Protocol):
    """Port interface for symmetric encryption plus URL-safe encoding."""

    def encrypt(self, plaintext: bytes) -> bytes: ...

    def decrypt(self, ciphertext: bytes) -> bytes:
        """Raises InvalidCiphertextError on tampered or foreign input."""
        ...

    def encode(self, data: bytes) -> str: ...

    def decode(self, text: str) -> bytes:
        """Raises InvalidCiphertextError on malformed input."""
        ...


class UserDirectory(Protocol):
    """Port interface for user persistence."""

    def exists_by_username_or_email(self, username: str, email: str) -> bool:
        """True if any user already holds username or email."""
        ...

    def create(self, pending_user: PendingUser) -> User:
        """
        Store a new, disabled user and assign its public_id.

        Uniqueness is enforced atomically by the store, so a concurrent
        duplicate that slipped past exists_by_username_or_email still fails.

        Raises:
            ConflictError: username or email already taken
        """
        ...

    def find_by_username(self, username: str) -> User | None: ...

    def find_by_public_id(self, public_id: str) -> User | None: ...

    def update(self, user: User) -> User:
        """
        Persist the mutable fields of user.

        Raises:
            NotFoundError: the user no longer exists
            ConflictError: the new email belongs to another user
        """
        ...

    def list_users(self, limit: int, offset: int) -> list[User]: ...

    def count_users(self) -> int: ...

    def delete(self, public_id: str) -> bool:
        """Delete the user. Returns False if nothing was deleted."""
        ...


class NotificationSender(Protocol):
    """Port interface for email delivery."""

    def send_verification_email(self, user: User, encoded_token: str) -> None:
        """
        Send the verification link to the user.

        Args:
            user: Newly registered (disabled) user
            encoded_token: Encrypted, URL-safe token for the link
        """
        ...

    def send_confirmation_email(self, user: User) -> None:
        """Tell the user their account is now active."""
        ...
