"""
Async PostgreSQL connection pool using asyncpg.

The pool is created once at startup and shared by every request; pooling
and reconnection are asyncpg's job.
"""
import logging
from typing import Optional

import asyncpg

from config import DatabaseConfig

logger = logging.getLogger(__name__)


class PostgresConnection:
    """Manages the asyncpg connection pool."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.pool: Optional[asyncpg.Pool] = None

    async def connect(self) -> asyncpg.Pool:
        """Create the connection pool."""
        self.pool = await asyncpg.create_pool(
            host=self.config.host,
            port=self.config.port,
            user=self.config.user or None,
            password=self.config.password or None,
            database=self.config.database,
            min_size=self.config.pool_min_size,
            max_size=self.config.pool_max_size,
        )
        logger.info(f"Connected to PostgreSQL at {self.config.host}:{self.config.port}/{self.config.database}")
        return self.pool

    async def close(self):
        """Close the pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None
