"""
JWT token codec adapter - Implements TokenCodec protocol.

Verification tokens are compact JWTs signed with a shared secret:

    {"sub": <username>, "iat": <issued>, "exp": <expires>, "jti": <random id>}

jti makes every issued token distinct, even two issued for the same
user within the same second.

Expiry is checked against the injected clock rather than inside
python-jose so that the validity window can be tested deterministically.
"""

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from src.domain.exceptions import ExpiredTokenError, InvalidSignatureError, MalformedTokenError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class JwtTokenCodec:
    """
    Implements TokenCodec protocol via python-jose.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl_seconds: int = 86400,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Args:
            secret: Signing key, read once at startup
            algorithm: JWS algorithm (HMAC family)
            ttl_seconds: Validity window of issued tokens
            clock: Returns the current time (timezone aware)
        """
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    def issue(self, username: str) -> str:
        """Create a signed token bound to username."""
        issued_at = self._clock()
        claims = {
            "sub": username,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._ttl).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def claims(self, token: str) -> dict[str, Any]:
        """
        Verify signature and expiry and return the token claims.

        Raises:
            ExpiredTokenError: now is at or past exp
            InvalidSignatureError: token parses but signature does not verify
            MalformedTokenError: token cannot be parsed or lacks sub/exp
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            # Distinguish a foreign signature from garbage input
            self._unverified_claims(token)
            raise InvalidSignatureError("Token signature does not verify") from None

        exp = claims.get("exp")
        if not isinstance(exp, int) or not claims.get("sub"):
            raise MalformedTokenError("Token is missing sub or exp")
        if self._clock().timestamp() >= exp:
            raise ExpiredTokenError("Token has expired")
        return claims

    def validate(self, token: str) -> bool:
        """True iff the signature verifies and the token has not expired."""
        try:
            self.claims(token)
        except (ExpiredTokenError, InvalidSignatureError, MalformedTokenError) as e:
            logger.debug("Token validation failed: %s", e)
            return False
        return True

    def subject_of(self, token: str) -> str:
        """
        Extract the username from a structurally valid token.

        Raises:
            MalformedTokenError: token cannot be parsed or has no subject
        """
        subject = self._unverified_claims(token).get("sub")
        if not isinstance(subject, str) or not subject:
            raise MalformedTokenError("Token has no subject")
        return subject

    def _unverified_claims(self, token: str) -> dict[str, Any]:
        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError:
            raise MalformedTokenError("Token cannot be parsed") from None
        if not isinstance(claims, dict):
            raise MalformedTokenError("Token claims are not an object")
        return claims
