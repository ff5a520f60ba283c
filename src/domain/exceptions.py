"""
Domain exceptions - Semantic error types for the sign-up flow.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
"""


class SignUpError(Exception):
    """Base class for sign-up domain errors."""

    pass


class ValidationError(SignUpError):
    """Registration input is blank, too long/short or malformed."""

    pass


class ConflictError(SignUpError):
    """Username or email already belongs to another user."""

    pass


class NotFoundError(SignUpError):
    """No user matches the given identifier."""

    pass


class TokenError(SignUpError):
    """Verification token cannot be accepted."""

    pass


class ExpiredTokenError(TokenError):
    """Token signature is fine but its expiry has passed."""

    pass


class InvalidSignatureError(TokenError):
    """Token parses but was not signed with our key."""

    pass


class MalformedTokenError(TokenError):
    """Token cannot be parsed or carries no subject."""

    pass


class StaleTokenError(TokenError):
    """Token is valid in isolation but no longer the one stored on the user."""

    pass


class InvalidCiphertextError(SignUpError):
    """Transport token is truncated, tampered or wrongly encoded."""

    pass


class DeliveryError(SignUpError):
    """Email could not be handed to the mail transport."""

    pass
