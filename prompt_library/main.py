from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prompt_library.core.config import Settings, get_settings
from prompt_library.core.logging import setup_logging
from prompt_library.middleware.logging import RequestLoggingMiddleware
from prompt_library.middleware.error_handling import ErrorHandlingMiddleware
from prompt_library.api.endpoints import prompts, history, imports, analytics
from prompt_library.services.prompt_store import PromptStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API application.

    The store is opened (schema ensured, seed data loaded if configured) when
    the application starts and closed when it shuts down. Schema or seed
    failures abort startup.
    """
    settings = settings or get_settings()

    if settings.configure_logging:
        setup_logging(log_level=settings.log_level, log_dir=settings.log_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = PromptStore.from_settings(settings)
        await store.open()
        if settings.seed_on_startup:
            try:
                await store.seed_if_empty()
            except Exception:
                await store.close()
                raise
        app.state.store = store
        logger.info(f"{settings.app_name} ready on {settings.database_url}")
        try:
            yield
        finally:
            await store.close()

    app = FastAPI(title=settings.app_name, version=settings.app_version, debug=settings.debug, lifespan=lifespan)
    app.state.settings = settings

    # Add middleware (order matters - last added runs first)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ErrorHandlingMiddleware, debug=settings.debug)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(prompts.router, prefix="/api", tags=["prompts"])
    app.include_router(history.router, prefix="/api", tags=["history"])
    app.include_router(imports.router, prefix="/api", tags=["imports"])
    app.include_router(analytics.router, prefix="/api", tags=["analytics"])

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"message": settings.app_name, "version": settings.app_version}

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        store: PromptStore = app.state.store
        database_status = "connected" if store.database.is_open else "disconnected"
        return {"status": "healthy", "database": database_status}

    return app


app = create_app()
