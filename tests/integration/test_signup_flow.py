"""
Integration tests for the sign-up flow.

Tests the full register -> verify flow through the API with a real database.
Requires PostgreSQL to be running (via docker-compose).
"""

import logging
import re
from collections.abc import Generator
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient
from psycopg_pool import ConnectionPool

from src.adapters.security.fernet_cipher import FernetCipher
from src.adapters.security.jwt_codec import JwtTokenCodec
from src.adapters.smtp.console import ConsoleEmailSender
from src.api.main import app

pytestmark = pytest.mark.integration

LINK_PATTERN = re.compile(r"Link: (\S+)")


@pytest.fixture
def client(pool: ConnectionPool) -> Generator[TestClient, None, None]:
    """
    Test client with a real database connection.

    The console sender runs synchronously here so the emailed link can be
    read from the logs right after the request.
    """
    app.state.pool = pool
    app.state.token_codec = JwtTokenCodec(secret="integration-secret", ttl_seconds=3600)
    app.state.cipher = FernetCipher(FernetCipher.generate_key())
    app.state.notifier = ConsoleEmailSender(base_url="http://testserver")
    yield TestClient(app)


def link_token(caplog: pytest.LogCaptureFixture) -> str:
    """Token parameter of the last verification link in the logs."""
    links = LINK_PATTERN.findall(caplog.text)
    assert links, "no verification link logged"
    return parse_qs(urlparse(links[-1]).query)["token"][0]


def register(client: TestClient, username: str = "alice", email: str = "alice@x.com"):
    return client.post(
        "/api/v1/users",
        json={"username": username, "email": email, "password": "secure123"},
    )


class TestRegisterFlow:
    """Integration tests for POST /api/v1/users."""

    def test_registration_creates_pending_user(
        self, client: TestClient, pool: ConnectionPool, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO):
            response = register(client)

        assert response.status_code == 201
        public_id = response.headers["location"].rsplit("/", 1)[-1]

        with pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                "SELECT username, email, enabled, verification_token FROM users WHERE public_id = %s",
                (public_id,),
            )
            row = cursor.fetchone()

        assert row[0] == "alice"
        assert row[1] == "alice@x.com"
        assert row[2] is False
        assert row[3] is not None
        # The emailed token is the encrypted form, never the stored JWT
        assert row[3] not in caplog.text
        assert "[VERIFICATION]" in caplog.text

    def test_email_normalized_through_stack(self, client: TestClient, pool: ConnectionPool) -> None:
        response = register(client, email="Alice@X.COM")
        assert response.status_code == 201

        with pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT email FROM users")
            assert cursor.fetchone()[0] == "alice@x.com"

    def test_duplicate_registration_returns_400(self, client: TestClient) -> None:
        assert register(client).status_code == 201

        response = register(client, email="someone-else@x.com")

        assert response.status_code == 400
        assert response.json() == {"detail": "Username or email already exists"}


class TestVerifyFlow:
    """Integration tests for POST /api/v1/users/sign-up/verify."""

    def test_full_sign_up(
        self, client: TestClient, pool: ConnectionPool, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO):
            register(client)
            token = link_token(caplog)
            response = client.post(
                "/api/v1/users/sign-up/verify", params={"token": token}, follow_redirects=False
            )

        assert response.status_code == 303
        assert caplog.text.count("[CONFIRMATION]") == 1

        with pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT enabled, verification_token FROM users WHERE username = 'alice'")
            enabled, token_after = cursor.fetchone()
        assert enabled is True
        assert token_after is None

    def test_repeat_registration_rejected_and_first_link_still_works(
        self, client: TestClient, pool: ConnectionPool, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO):
            register(client)
            first_token = link_token(caplog)
            repeat = register(client)

        assert repeat.status_code == 400
        assert repeat.json() == {"detail": "Username or email already exists"}
        assert caplog.text.count("[VERIFICATION]") == 1

        response = client.post(
            "/api/v1/users/sign-up/verify", params={"token": first_token}, follow_redirects=False
        )
        assert response.status_code == 303

    def test_garbage_token_rejected(self, client: TestClient) -> None:
        response = client.post("/api/v1/users/sign-up/verify", params={"token": "garbage"})

        assert response.status_code == 400
        assert response.json() == {"view": "user/sign-up", "error": "Invalid token"}
