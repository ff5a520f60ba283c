"""
devboard application.

Builds the FastAPI app, mounts the v1 router under /api/v1 and wires the
long-lived collaborators in the lifespan handler.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import psycopg
from fastapi import FastAPI, HTTPException, Request, status
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import run_migrations
from src.adapters.security.fernet_cipher import FernetCipher
from src.adapters.security.jwt_codec import JwtTokenCodec
from src.adapters.smtp.background import BackgroundEmailDispatcher
from src.adapters.smtp.console import ConsoleEmailSender
from src.api.v1 import router as v1_router
from src.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

tags_metadata = [
    {
        "name": "v1",
        "description": "Sign-up API v1 - Register users, verify emailed tokens and manage accounts",
    },
]


def build_cipher(settings: Settings) -> FernetCipher:
    """
    Create the link cipher from settings.

    Without a configured key a temporary one is generated; links issued
    before a restart then stop working.
    """
    key = settings.encryption_key
    if not key:
        logger.warning(
            "ENCRYPTION_KEY not set. Generating a temporary key; verification links "
            "will not survive a restart."
        )
        key = FernetCipher.generate_key()
    return FernetCipher(key)


def build_token_codec(settings: Settings) -> JwtTokenCodec:
    return JwtTokenCodec(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        ttl_seconds=settings.verification_ttl_seconds,
    )


def build_notifier(settings: Settings) -> BackgroundEmailDispatcher:
    sender = ConsoleEmailSender(base_url=settings.base_url, sender=settings.mail_from)
    return BackgroundEmailDispatcher(sender, max_workers=settings.email_workers)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the pool, apply migrations and publish collaborators on app.state.

    On shutdown pending emails are flushed before the pool closes.
    """
    settings = get_settings()

    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )
    logger.info(
        "Database pool open (min=%d, max=%d)", settings.pool_min_size, settings.pool_max_size
    )
    run_migrations(pool)

    notifier = build_notifier(settings)
    app.state.pool = pool
    app.state.token_codec = build_token_codec(settings)
    app.state.cipher = build_cipher(settings)
    app.state.notifier = notifier
    logger.info("devboard ready, verification links point at %s", settings.base_url)

    try:
        yield
    finally:
        notifier.shutdown(wait=True)
        pool.close()
        logger.info("devboard stopped")


app = FastAPI(
    title="devboard",
    description="Sign-up API - Email verification with signed, encrypted tokens",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.include_router(v1_router, prefix="/api/v1")


@app.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """Report 200 when the database answers, 503 otherwise."""
    try:
        with request.app.state.pool.connection() as conn:
            conn.execute("SELECT 1")
    except psycopg.Error as e:
        logger.error("Health check failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database unavailable"
        ) from None
    return {"status": "healthy"}
