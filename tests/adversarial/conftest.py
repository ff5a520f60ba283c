"""
Shared fixtures for adversarial tests.

Attacks run against the real codec, cipher and in-memory directory so
that they need no external services.
"""

from unittest.mock import Mock

import pytest

from src.domain.signup import SignUpService

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture
def victim_link(signup_service: SignUpService, notifier: Mock) -> str:
    """Register a victim and return the token from their verification email."""
    signup_service.register("victim", "victim@example.com", "password123")
    return notifier.send_verification_email.call_args[0][1]
