# main.py
#
# Description:
# This script serves as the main entry point for the recipe search service.
# It initializes the FastAPI application, configures logging and CORS,
# and includes all the API routers from their respective modules.
#
# Key Responsibilities:
# - Build the dependency container on startup and close it on shutdown.
# - Configure Cross-Origin Resource Sharing (CORS) to allow requests from any origin.
# - Include API routers for health, search, sync events and admin functionalities.
# - Define a root endpoint for basic service information.

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Import application-specific settings and routers
from app.config.settings import settings
from app.api.v1.routes.health import router as health_router
from app.api.v1.routes.search import router as search_router
from app.api.v1.routes.sync import router as sync_router
from app.api.v1.routes.admin import router as admin_router
from infrastructure.container import DIContainer

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("opensearch").setLevel(logging.WARNING)


def create_app(container: Optional[DIContainer] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        container: pre-built container (tests); one is created from settings otherwise.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.container = container or DIContainer(settings)
        await app.state.container.startup()
        logger.info("Recipe search service started")
        try:
            yield
        finally:
            await app.state.container.shutdown()
            logger.info("Recipe search service stopped")

    app = FastAPI(title="Recipe Search Service", version="0.1.0", lifespan=lifespan)

    # --- Middleware Configuration ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- API Router Inclusion ---
    # Each router is prefixed with "/v1" to version the API.
    app.include_router(health_router, prefix="/v1")
    app.include_router(search_router, prefix="/v1")
    app.include_router(sync_router, prefix="/v1")
    app.include_router(admin_router, prefix="/v1")

    # --- Root Endpoint ---
    @app.get("/")
    def root():
        """
        Root endpoint to provide basic information about the running service.

        Returns:
            dict: A dictionary containing the service name and its current environment.
        """
        return {"service": "recipe-search", "env": settings.app_env}

    return app


configure_logging(settings.log_level)
app = create_app()
