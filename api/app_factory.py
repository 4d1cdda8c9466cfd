"""Application factory.

create_app() wires the caller's access transformers and content handlers
into a FastAPI application. Mandatory options are checked here, so a
misconfigured service refuses to start instead of failing per request.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional, Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app_state import AppState
from config import Config, default_config
from errors import ConfigurationError, register_error_handlers
from operations.content_delivery import ContentDeliveryNegotiator
from startup.manager import StartupManager
from transform import entity_pipeline, file_pipeline
from routes.health import router as health_router
from routes.entity import router as entity_router
from routes.entities import router as entities_router
from routes.files import router as files_router
from routes.file import router as file_router
from routes.crate import router as crate_router
from routes.search import router as search_router

logger = logging.getLogger(__name__)

API_TITLE = "RO-Crate Catalogue API"
API_VERSION = "1.0.0"
ROCRATE_CONTENT_TYPE = "application/ld+json"


def _require_handler(name: str, handler):
    if handler is None:
        raise ConfigurationError(f"{name} is required")
    for method in ("get", "head"):
        if not callable(getattr(handler, method, None)):
            raise ConfigurationError(f"{name} must provide a callable {method}()")


def create_app(
    *,
    access_transformer,
    file_access_transformer,
    file_handler,
    rocrate_handler,
    entity_transformers: Sequence = (),
    file_transformers: Sequence = (),
    config: Optional[Config] = None,
    store=None,
    search_client=None,
) -> FastAPI:
    """Build the catalogue API application.

    Args:
        access_transformer: adds the access block to every entity (required)
        file_access_transformer: adds the access block to every file (required)
        file_handler: serves file content, see handlers.interfaces (required)
        rocrate_handler: serves RO-Crate documents (required)
        entity_transformers: optional enrichment stages, applied in order
        file_transformers: optional enrichment stages for files
        config: defaults to the environment configuration
        store: pre-connected record store; connected at startup when omitted
        search_client: pre-connected search client; connected at startup when omitted

    Raises:
        ConfigurationError: a mandatory option is missing or not callable
    """
    config = config or default_config

    _require_handler("file_handler", file_handler)
    _require_handler("rocrate_handler", rocrate_handler)

    state = AppState(config)
    state.core.store = store
    state.core.search_client = search_client
    state.transforms.entity_pipeline = entity_pipeline(access_transformer, entity_transformers)
    state.transforms.file_pipeline = file_pipeline(file_access_transformer, file_transformers)
    state.content.file_negotiator = ContentDeliveryNegotiator(file_handler, label="file")
    state.content.rocrate_negotiator = ContentDeliveryNegotiator(
        rocrate_handler, label="RO-Crate", content_type=ROCRATE_CONTENT_TYPE
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan"""
        manager = StartupManager(state)
        await manager.initialize()
        try:
            yield
        finally:
            await manager.shutdown()

    app = FastAPI(
        title=API_TITLE,
        description="Read-only access to an RO-Crate archival catalogue",
        version=API_VERSION,
        lifespan=lifespan
    )

    if config.server.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "HEAD", "POST", "OPTIONS"],
            allow_headers=["*"],
            expose_headers=["Content-Disposition", "Content-Length"],
        )

    register_error_handlers(app)

    # Store state in app for route access
    app.state.app_state = state

    app.include_router(health_router)
    # /entity/{id}/rocrate must be matched before the catch-all /entity/{id}
    app.include_router(crate_router)
    app.include_router(entity_router)
    app.include_router(entities_router)
    app.include_router(files_router)
    app.include_router(file_router)
    app.include_router(search_router)

    logger.debug(f"Application created (cors={config.server.cors_enabled})")
    return app
