"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.

Long-lived collaborators (connection pool, token codec, cipher, email
dispatcher) are created once in the application lifespan and kept on
app.state; services are assembled per request from them.
"""

import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresUserDirectory
from src.config.settings import get_settings
from src.domain.admin import UserAdminService
from src.domain.ports import NotificationSender, ReversibleCipher, TokenCodec
from src.domain.signup import SignUpService


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_user_directory(request: Request) -> PostgresUserDirectory:
    """Create user directory with connection pool from app state."""
    pool = get_pool(request)
    return PostgresUserDirectory(pool)


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_cipher(request: Request) -> ReversibleCipher:
    return request.app.state.cipher


def get_notifier(request: Request) -> NotificationSender:
    """Get the background email dispatcher (singleton per app)."""
    return request.app.state.notifier


def get_signup_service(request: Request) -> SignUpService:
    """
    Create sign-up service with injected dependencies.

    Wires together the directory, token codec, cipher and notifier.
    """
    return SignUpService(
        directory=get_user_directory(request),
        token_codec=get_token_codec(request),
        cipher=get_cipher(request),
        notifier=get_notifier(request),
        bcrypt_cost=get_settings().bcrypt_cost,
    )


def get_admin_service(request: Request) -> UserAdminService:
    return UserAdminService(directory=get_user_directory(request))


# HTTP BASIC AUTH security scheme for OpenAPI documentation
http_basic = HTTPBasic()


def require_admin(credentials: HTTPBasicCredentials = Depends(http_basic)) -> str:
    """
    Check HTTP BASIC AUTH credentials against the configured administrator.

    FastAPI's HTTPBasic already answers 401 for a missing or malformed
    Authorization header. Both comparisons always run so that response
    time does not reveal which part was wrong.

    Returns:
        The administrator username
    """
    settings = get_settings()
    username_ok = secrets.compare_digest(
        credentials.username.encode(), settings.admin_username.encode()
    )
    password_ok = secrets.compare_digest(
        credentials.password.encode(), settings.admin_password.encode()
    )
    if not (username_ok and password_ok):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username
