"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Token codec and cipher built from fixed test secrets
- In-memory user directory
- Mock notification sender
- Sign-up service wired from the above
"""

from unittest.mock import Mock

import pytest

from src.adapters.repository.memory import InMemoryUserDirectory
from src.adapters.security.fernet_cipher import FernetCipher
from src.adapters.security.jwt_codec import JwtTokenCodec
from src.domain.signup import SignUpService

TEST_JWT_SECRET = "test-signing-secret"
# Fixed key so that tests are reproducible
TEST_FERNET_KEY = "Y2Q0ZTVmNmE3YjhjOWQwZTFmMmEzYjRjNWQ2ZTdmOGE="


@pytest.fixture
def token_codec() -> JwtTokenCodec:
    """Token codec with a one-hour validity window."""
    return JwtTokenCodec(secret=TEST_JWT_SECRET, ttl_seconds=3600)


@pytest.fixture
def cipher() -> FernetCipher:
    return FernetCipher(TEST_FERNET_KEY)


@pytest.fixture
def directory() -> InMemoryUserDirectory:
    return InMemoryUserDirectory()


@pytest.fixture
def notifier() -> Mock:
    """Mock NotificationSender that records every send."""
    return Mock(spec=["send_verification_email", "send_confirmation_email"])


@pytest.fixture
def signup_service(
    directory: InMemoryUserDirectory,
    token_codec: JwtTokenCodec,
    cipher: FernetCipher,
    notifier: Mock,
) -> SignUpService:
    """Sign-up service over in-memory storage; bcrypt cost kept minimal for speed."""
    return SignUpService(
        directory=directory,
        token_codec=token_codec,
        cipher=cipher,
        notifier=notifier,
        bcrypt_cost=4,
    )
