"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.outbox import OutboxEmailProvider
from infrastructure.email.protocol import EmailProvider
from infrastructure.email.templates import EmailTemplates
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from repositories.indexes import (
    OTPS_COLLECTION,
    TOKENS_COLLECTION,
    USERS_COLLECTION,
    ensure_indexes,
)
from repositories.otp_repository import OneTimeCodeRepository
from repositories.token_repository import RefreshTokenRepository
from repositories.user_repository import UserRepository
from routes.auth_routes import router as auth_router
from routes.dev_routes import router as dev_router
from routes.health_routes import router as health_router
from routes.user_routes import router as user_router
from services.identity_service import IdentityService
from services.otp_service import OneTimeCodeService
from services.token_service import TokenService
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def build_email_provider(settings: AppSettings, http_client: HttpClient) -> EmailProvider:
    if settings.email.email_provider == "zeptomail":
        return ZeptoMailProvider(settings.email, http_client)
    return OutboxEmailProvider(
        preview_base_url=settings.app_url,
        capacity=settings.email.outbox_capacity,
    )


def build_identity_service(
    settings: AppSettings,
    db: AsyncDatabase,
    email_provider: EmailProvider,
) -> IdentityService:
    """Wire repositories and services for one database."""
    tokens = TokenService(
        RefreshTokenRepository(db[TOKENS_COLLECTION]),
        access_secret=settings.jwt.jwt_secret,
        refresh_secret=settings.jwt.refresh_secret,
        access_ttl_seconds=settings.access_token_ttl_seconds,
        refresh_ttl_days=settings.jwt.refresh_token_ttl_days,
        issuer=settings.jwt.jwt_issuer,
        audience=settings.jwt.jwt_audience,
    )
    codes = OneTimeCodeService(
        OneTimeCodeRepository(db[OTPS_COLLECTION]),
        email_provider,
        EmailTemplates(settings.app_name),
        expiry_minutes=settings.otp.otp_expiry_minutes,
        length=settings.otp.otp_length,
    )
    return IdentityService(
        UserRepository(db[USERS_COLLECTION]),
        codes,
        tokens,
        expose_email_preview=not settings.is_production,
    )


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging.log_level, settings.logging.log_format, settings.env)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            environment=settings.env,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        db = mongo_client[settings.db.db_name]
        app.state.mongo_client = mongo_client
        app.state.db = db
        app.state.settings = settings

        await ensure_indexes(db)

        http_client = HttpClient(user_agent=settings.app_name)
        email_provider = build_email_provider(settings, http_client)
        app.state.http_client = http_client
        app.state.email_provider = email_provider
        app.state.identity_service = build_identity_service(settings, db, email_provider)

        log.info(
            "app_started",
            env=settings.env,
            db_name=settings.db.db_name,
            email_provider=settings.email.email_provider,
            access_preset=settings.jwt.access_token_preset,
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await http_client.aclose()
        await mongo_client.close()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(user_router)
    if not settings.is_production:
        app.include_router(dev_router)

    return app
