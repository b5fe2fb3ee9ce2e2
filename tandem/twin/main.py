from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tandem.twin.api.auth import router as auth_router
from tandem.twin.api.viewer import router as viewer_router
from tandem.twin.core.auth.client_credentials import ClientCredentialsProvider
from tandem.twin.core.auth.provider import TokenProvider
from tandem.twin.core.config import Settings, settings as default_settings
from tandem.twin.core.logging import configure_logging
from tandem.twin.viewer.config import ViewerConfig

logger = logging.getLogger(__name__)


def build_token_provider(settings: Settings) -> ClientCredentialsProvider:
    if not settings.has_credentials:
        logger.warning(
            "FORGE_CLIENT_ID / FORGE_CLIENT_SECRET not set; token requests will fail"
        )

    return ClientCredentialsProvider(
        client_id=settings.forge_client_id,
        client_secret=settings.forge_client_secret,
        token_url=settings.forge_token_url,
        scope=settings.forge_token_scope,
        refresh_buffer=settings.token_refresh_buffer_seconds,
        timeout=settings.token_timeout_seconds,
    )


def create_app(
    settings: Settings | None = None,
    token_provider: TokenProvider | None = None,
) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        base = f"http://localhost:{settings.port}"
        logger.info(
            "Tandem authentication server running",
            extra={
                "url": base,
                "health": f"{base}/health",
                "token_endpoint": f"{base}/api/auth/token",
            },
        )
        yield

    app = FastAPI(
        title="Tandem Twin",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Explicit wiring
    app.state.settings = settings
    app.state.token_provider = token_provider or build_token_provider(settings)
    app.state.viewer_config = ViewerConfig.from_settings(settings)

    @app.get("/health")
    async def health() -> dict:
        return {
            "status": "ok",
            "message": "Tandem authentication server running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(viewer_router, prefix="/twin", tags=["viewer"])
    return app


def run() -> None:
    import uvicorn

    uvicorn.run(
        create_app(),
        host=default_settings.host,
        port=default_settings.port,
        log_config=None,
    )
