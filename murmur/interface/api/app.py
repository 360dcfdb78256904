"""FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import logfire
from dishka import AsyncContainer
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from murmur.config import Settings
from murmur.domain.service import SettingService
from murmur.interface.api.routes import admin_comments, comments, health
from murmur.interface.error import register_error_handlers
from murmur.render.renderer import EMOJI_SETTING_KEY, MarkdownRenderer
from murmur.util.di.container import create_container, setup_di
from murmur.util.observability import (
    instrument_fastapi,
    instrument_httpx,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load the emoji pack on startup; close the container on shutdown.

    Closing the container stops the notification pool (draining or
    abandoning queued jobs as configured) and releases the database
    engine and the cache connection.
    """
    container: AsyncContainer = app.state.dishka_container
    setting_service = await container.get(SettingService)
    renderer = await container.get(MarkdownRenderer)
    await renderer.load_emoji_pack(setting_service.get(EMOJI_SETTING_KEY))
    logfire.info("Application started", emojis=renderer.emoji_count)

    yield

    await container.close()
    logfire.info("Application stopped")


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this.

    Args:
        container: DI container to use (tests pass one built from mocks);
            the production container is built when omitted
    """
    settings = Settings()

    # Instrument httpx for outbound HTTP requests
    # (Logfire must be configured before instrumentation)
    instrument_httpx()

    app_instance = FastAPI(
        title="Murmur API",
        description="Comment engine for blogs: threaded comments, moderation and notifications",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    instrument_fastapi(app_instance)

    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "Accept",
            "Origin",
            "User-Agent",
            "Cache-Control",
            "X-Requested-With",
        ],
        expose_headers=["Content-Length", "Content-Type", "Content-Disposition"],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    # Setup dependency injection
    setup_di(app_instance, container or create_container())

    register_error_handlers(app_instance)

    # Register routes
    app_instance.include_router(health.router)
    app_instance.include_router(comments.router)
    app_instance.include_router(admin_comments.router)

    return app_instance


# Create app instance for uvicorn
# Note: Logfire must be configured before this module is imported
# In production: start_app.py handles this
app = create_app()
