from config import Config


class CoreServices:
    """Core service dependencies

    Holds the long-lived collaborators shared by every request: the record
    store and the search client. Both are connected once at startup (or
    injected by the caller) and closed at shutdown.
    """

    def __init__(self):
        self.store = None
        self.search_client = None


class TransformServices:
    """Record transformation pipelines

    Built and validated when the application is created, so a missing
    access transformer is caught before the first request.
    """

    def __init__(self):
        self.entity_pipeline = None
        self.file_pipeline = None


class ContentServices:
    """Content delivery for file downloads and RO-Crate documents"""

    def __init__(self):
        self.file_negotiator = None
        self.rocrate_negotiator = None


class AppState:
    """Application state container

    Per-process context composed of focused state objects. Routes reach
    collaborators only through the delegation methods below.
    """

    def __init__(self, config: Config):
        self.config = config
        self.core = CoreServices()
        self.transforms = TransformServices()
        self.content = ContentServices()

    # === Service Access Delegation (for route handlers) ===

    def get_config(self) -> Config:
        return self.config

    def get_store(self):
        """Get record store (entities and files repositories)"""
        return self.core.store

    def get_search_client(self):
        """Get search engine client"""
        return self.core.search_client

    def get_entity_pipeline(self):
        return self.transforms.entity_pipeline

    def get_file_pipeline(self):
        return self.transforms.file_pipeline

    def get_file_negotiator(self):
        """Get content negotiator wrapping the file handler"""
        return self.content.file_negotiator

    def get_rocrate_negotiator(self):
        """Get content negotiator wrapping the RO-Crate handler"""
        return self.content.rocrate_negotiator

    # === Lifecycle Management Delegation ===

    async def close_store(self):
        if self.core.store is not None:
            await self.core.store.close()

    async def close_search_client(self):
        if self.core.search_client is not None:
            await self.core.search_client.close()
