"""
Domain layer - Pure business logic with zero framework imports.

This package contains the sign-up verification workflow and the user
administration operations. It defines its own port interfaces for
infrastructure abstraction, ensuring true hexagonal architecture decoupling.
"""

from .admin import UserAdminService
from .exceptions import (
    ConflictError,
    DeliveryError,
    ExpiredTokenError,
    InvalidCiphertextError,
    InvalidSignatureError,
    MalformedTokenError,
    NotFoundError,
    SignUpError,
    StaleTokenError,
    TokenError,
    ValidationError,
)
from .ports import (
    NotificationSender,
    ReversibleCipher,
    SignUpState,
    TokenCodec,
    UserDirectory,
    VerifyResult,
)
from .signup import SignUpService, VerifyOutcome, state_of
from .user import PendingUser, User

__all__ = [
    "ConflictError",
    "DeliveryError",
    "ExpiredTokenError",
    "InvalidCiphertextError",
    "InvalidSignatureError",
    "MalformedTokenError",
    "NotFoundError",
    "NotificationSender",
    "PendingUser",
    "ReversibleCipher",
    "SignUpError",
    "SignUpService",
    "SignUpState",
    "StaleTokenError",
    "TokenCodec",
    "TokenError",
    "User",
    "UserAdminService",
    "UserDirectory",
    "ValidationError",
    "VerifyOutcome",
    "VerifyResult",
    "state_of",
]
