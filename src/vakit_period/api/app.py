"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vakit_period import __version__
from vakit_period.api.dependencies import initialize_app_state, shutdown_app_state
from vakit_period.api.routes import router as api_router
from vakit_period.config import AppConfig, get_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    logger.info("Vakit-Period başlatılıyor...")

    state = await initialize_app_state(app.state.config)
    app.state.vakit = state

    # Bildirim zamanlayıcısı geçiş zamanlayıcısından önce çalışmalı
    state.scheduler_adapter.start()
    await state.transition_scheduler.start()

    logger.info("Vakit-Period hazır!")

    yield

    # Shutdown
    logger.info("Vakit-Period kapatılıyor...")
    await shutdown_app_state(state)
    app.state.vakit = None
    logger.info("Vakit-Period kapatıldı.")


def create_app(config: AppConfig | None = None) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        config: Uygulama yapılandırması (varsayılan: ortam değişkenleri)

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Vakit-Period",
        description="Namaz vakti periyot durumu ve geçiş zamanlayıcısı",
        version=__version__,
        lifespan=lifespan,
    )

    # Store config in app state
    app.state.config = config or get_config()
    app.state.vakit = None

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # API routes
    app.include_router(api_router, prefix="/api")

    # Health check
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
