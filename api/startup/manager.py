"""Startup manager - connects and releases the shared collaborators.

Collaborators passed to create_app() are used as-is and left open at
shutdown; the caller owns them. Anything created here is closed here.
"""
import logging

from app_state import AppState
from search import SearchClientFactory
from store import CatalogueStore, PostgresConnection, SchemaManager

logger = logging.getLogger(__name__)


class StartupManager:
    """Manages application startup and shutdown.

    Phases:
    - Store: asyncpg pool, optional development schema
    - Search: client creation and reachability ping
    """

    def __init__(self, app_state: AppState):
        self.state = app_state
        self._owns_store = False
        self._owns_search_client = False

    async def initialize(self):
        """Connect everything the application needs before serving"""
        logger.info("Initializing catalogue API...")
        try:
            await self._init_store()
            await self._init_search()
        except Exception:
            await self.shutdown()
            raise
        logger.info("Catalogue API ready")

    async def shutdown(self):
        """Close the collaborators opened by initialize()"""
        if self._owns_search_client:
            await self.state.close_search_client()
            self.state.core.search_client = None
            self._owns_search_client = False
        if self._owns_store:
            await self.state.close_store()
            self.state.core.store = None
            self._owns_store = False
        logger.info("Catalogue API stopped")

    # ============ Store Phase ============

    async def _init_store(self):
        if self.state.core.store is not None:
            logger.info("Using injected record store")
            return

        database = self.state.config.database
        pool = await PostgresConnection(database).connect()
        self.state.core.store = CatalogueStore(pool)
        self._owns_store = True

        if database.create_schema:
            await SchemaManager(pool).create_schema()

    # ============ Search Phase ============

    async def _init_search(self):
        if self.state.core.search_client is not None:
            logger.info("Using injected search client")
            return

        factory = SearchClientFactory(self.state.config.search)
        self.state.core.search_client = await factory.connect()
        self._owns_search_client = True
