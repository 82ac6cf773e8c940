"""FastAPI application wiring for the user service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.notifications import router as notifications_router
from .api.routes import router as v1_router
from .bootstrap import ensure_admin
from .config import get_settings
from .domain.notifications import AdminNotifier
from .domain.service import AccountService
from .repository import AccountRepository
from .security.credentials import CredentialService
from .security.passwords import Argon2PasswordHasher
from .sinks import build_sink, build_smtp_sink

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (Postgres pool, HTTP client, services) for the app lifecycle."""
    pool = ConnectionPool(settings.database_url, open=False)
    pool.open()
    try:
        with httpx.Client(timeout=settings.notification_timeout_seconds) as http_client:
            repository = AccountRepository(pool)
            repository.ensure_schema()
            hasher = Argon2PasswordHasher.from_settings(settings)
            if settings.bootstrap_admin_username and settings.bootstrap_admin_password:
                ensure_admin(
                    repository,
                    hasher,
                    username=settings.bootstrap_admin_username,
                    password=settings.bootstrap_admin_password,
                    email=settings.bootstrap_admin_email or f"{settings.bootstrap_admin_username}@localhost",
                )

            notifier = AdminNotifier(
                repository,
                build_sink(settings, http_client),
                include_password_hash=settings.notify_include_password_hash,
            )
            if settings.notify_include_password_hash:
                logger.warning("NOTIFY_INCLUDE_PASSWORD_HASH is on; admin emails will contain password hashes")

            app.state.pool = pool
            app.state.account_service = AccountService(repository, hasher, notifier)
            app.state.credential_service = CredentialService(repository, hasher)
            app.state.email_sink = build_smtp_sink(settings)
            yield
    finally:
        pool.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(v1_router)
app.include_router(notifications_router)
