"""
Sign-up domain service - two-phase registration and verification.

Phase 1 (register):
    REQUESTED -> PENDING_VERIFICATION
    Input is validated, conflicts are checked, a verification token is
    issued and stored on a disabled user, and the encrypted token is
    emailed as a link.

Phase 2 (verify):
    PENDING_VERIFICATION -> VERIFIED
    The link token is decoded, decrypted and validated, then compared with
    the token currently stored on the user. On success the user is enabled,
    the token is cleared and a confirmation email is sent.

Any failure ends the request in REJECTED. Nothing is retried, and a
repeat registration for a username or email already on record is a
conflict that leaves the existing user untouched.

Email delivery is fire-and-forget: a failed send is logged and never
rolls back the user write that preceded it.
"""

import logging
import secrets
from dataclasses import dataclass

import bcrypt
from email_validator import EmailNotValidError, validate_email

from .exceptions import (
    ConflictError,
    DeliveryError,
    InvalidCiphertextError,
    NotFoundError,
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
from .user import PendingUser, User

logger = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50


@dataclass(frozen=True)
class VerifyOutcome:
    """Result of a verification callback, with the user when one was found."""

    result: VerifyResult
    user: User | None = None

    @property
    def state(self) -> SignUpState:
        if self.result == VerifyResult.SUCCESS:
            return SignUpState.VERIFIED
        return SignUpState.REJECTED


def state_of(user: User) -> SignUpState:
    """Workflow state of a stored user."""
    if user.enabled:
        return SignUpState.VERIFIED
    return SignUpState.PENDING_VERIFICATION


@dataclass
class SignUpService:
    """
    Domain service for the sign-up flow.

    Orchestrates the directory, token codec, cipher and notification
    sender. All collaborators are injected; the service holds no state
    of its own between calls.
    """

    directory: UserDirectory
    token_codec: TokenCodec
    cipher: ReversibleCipher
    notifier: NotificationSender
    bcrypt_cost: int = 10

    def register(self, username: str, email: str, password: str) -> User:
        """
        Register a new user and send the verification email.

        Any overlap with an existing user, pending or verified, is a
        conflict; the existing record is never modified.

        Args:
            username: Requested username (3-50 characters)
            email: User's email address (will be normalized)
            password: User's password (will be hashed)

        Returns:
            The stored, disabled user (PENDING_VERIFICATION)

        Raises:
            ValidationError: Input is blank or malformed
            ConflictError: Username or email already belongs to a user
        """
        logger.debug("Sign-up %s for %r", SignUpState.REQUESTED.value, username)
        username, email = self._validate(username, email, password)

        if self.directory.exists_by_username_or_email(username, email):
            logger.warning(
                "Sign-up %s, username or email exists: %s", SignUpState.REJECTED.value, username
            )
            raise ConflictError(username)

        token = self.token_codec.issue(username)
        user = self.directory.create(
            PendingUser(
                username=username,
                email=email,
                password_hash=self._hash_password(password),
                verification_token=token,
            )
        )
        logger.info(
            "Sign-up %s for %s (%s)",
            state_of(user).value,
            user.username,
            user.public_id,
        )

        encrypted = self.cipher.encrypt(token.encode())
        logger.debug("Encrypted verification token: %s", encrypted.decode())
        encoded_token = self.cipher.encode(encrypted)

        try:
            self.notifier.send_verification_email(user, encoded_token)
        except DeliveryError:
            logger.exception("Verification email to %s failed", user.email)
        return user

    def verify(self, encoded_token: str) -> VerifyOutcome:
        """
        Complete sign-up from the token carried in a verification link.

        Checks, in order:
        1. Token decodes and decrypts
        2. Signature and expiry are valid
        3. Token subject names an existing user
        4. User is not already enabled
        5. Token equals the one stored on the user (constant-time)

        Args:
            encoded_token: Value of the link's token parameter

        Returns:
            VerifyOutcome with SUCCESS and the enabled user, or the
            specific rejection reason
        """
        try:
            token = self.cipher.decrypt(self.cipher.decode(encoded_token)).decode()
        except (InvalidCiphertextError, UnicodeDecodeError):
            logger.debug("Verification token could not be decrypted")
            return VerifyOutcome(VerifyResult.INVALID_TOKEN)

        if not self.token_codec.validate(token):
            logger.debug("Verification token failed signature or expiry check")
            return VerifyOutcome(VerifyResult.INVALID_TOKEN)

        try:
            username = self.token_codec.subject_of(token)
        except TokenError:
            logger.debug("Verification token has no usable subject")
            return VerifyOutcome(VerifyResult.INVALID_TOKEN)

        user = self.directory.find_by_username(username)
        if user is None:
            logger.debug("Verification token names unknown user %s", username)
            return VerifyOutcome(VerifyResult.NOT_FOUND)

        if user.enabled:
            logger.debug("User %s is already verified", username)
            return VerifyOutcome(VerifyResult.ALREADY_VERIFIED, user)

        try:
            self._ensure_current(user, token)
        except StaleTokenError:
            logger.debug("Verification token for %s is no longer current", username)
            return VerifyOutcome(VerifyResult.STALE_TOKEN, user)

        user.enabled = True
        user.verification_token = None
        try:
            user = self.directory.update(user)
        except NotFoundError:
            logger.debug("User %s was deleted during verification", username)
            return VerifyOutcome(VerifyResult.NOT_FOUND)
        logger.info("Sign-up %s for %s", state_of(user).value, user.username)

        try:
            self.notifier.send_confirmation_email(user)
        except DeliveryError:
            logger.exception("Confirmation email to %s failed", user.email)
        return VerifyOutcome(VerifyResult.SUCCESS, user)

    def _ensure_current(self, user: User, token: str) -> None:
        """Raise StaleTokenError unless token is the one stored on user."""
        stored = user.verification_token or ""
        if not secrets.compare_digest(stored.encode(), token.encode()):
            raise StaleTokenError(user.username)

    def _validate(self, username: str, email: str, password: str) -> tuple[str, str]:
        """
        Normalize and check registration input.

        Username is stripped; email is stripped and lowercased.
        """
        username = (username or "").strip()
        email = self._normalize_email(email or "")

        if not username:
            raise ValidationError("Username must not be blank")
        if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
            raise ValidationError(
                f"Username must be between {USERNAME_MIN_LENGTH} "
                f"and {USERNAME_MAX_LENGTH} characters"
            )
        if not email:
            raise ValidationError("Email must not be blank")
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValidationError(f"Invalid email: {e}") from None
        if not password or not password.strip():
            raise ValidationError("Password must not be blank")
        return username, email

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()

    def _hash_password(self, password: str) -> str:
        """
        Hash password using bcrypt.

        bcrypt only uses the first 72 bytes of input.
        """
        password_bytes = password.encode()[:72]
        return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=self.bcrypt_cost)).decode()
