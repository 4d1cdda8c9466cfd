"""
OpenSearch client factory.

One AsyncOpenSearch client is created per process and shared by all
requests. Startup refuses to continue if the cluster does not answer a
ping.
"""
import logging

from opensearchpy import AsyncOpenSearch

from config import SearchConfig

logger = logging.getLogger(__name__)


class SearchUnavailableError(RuntimeError):
    """The search engine did not answer the startup ping"""


class SearchClientFactory:
    """Creates and verifies the shared search client."""

    def __init__(self, config: SearchConfig):
        self.config = config

    def create(self) -> AsyncOpenSearch:
        """Create the client (no network I/O)."""
        return AsyncOpenSearch(
            hosts=[self.config.url],
            verify_certs=self.config.verify_certs,
            ssl_show_warn=self.config.verify_certs,
        )

    async def connect(self) -> AsyncOpenSearch:
        """Create the client and check the cluster is reachable."""
        client = self.create()
        await self.verify(client)
        return client

    async def verify(self, client):
        """Ping the cluster; close the client and raise if it is down."""
        if not await client.ping():
            await client.close()
            raise SearchUnavailableError(f"Failed to connect to OpenSearch at {self.config.url}")
        logger.info(f"Connected to OpenSearch at {self.config.url}")
