"""Development schema bootstrap.

Production schemas are managed by external migrations; this only creates
the tables when they are missing so a local setup can start empty.
"""
import logging

logger = logging.getLogger(__name__)


class SchemaManager:
    """Creates the entities and files tables if they do not exist."""

    def __init__(self, pool):
        self.pool = pool

    async def create_schema(self):
        """Create all required tables."""
        await self._create_entities_table()
        await self._create_files_table()
        logger.info("PostgreSQL schema initialized")

    async def _create_entities_table(self):
        await self.pool.execute("""
            CREATE TABLE IF NOT EXISTS entities (
                id SERIAL PRIMARY KEY,
                rocrate_id VARCHAR(2048) UNIQUE NOT NULL,
                name TEXT NOT NULL,
                description TEXT NOT NULL,
                entity_type VARCHAR(255) NOT NULL,
                member_of VARCHAR(2048),
                root_collection VARCHAR(2048),
                metadata_license_id VARCHAR(2048) NOT NULL,
                content_license_id VARCHAR(2048) NOT NULL,
                meta JSONB,
                created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
        """)
        await self.pool.execute(
            "CREATE INDEX IF NOT EXISTS idx_entities_member_of ON entities(member_of)"
        )
        await self.pool.execute(
            "CREATE INDEX IF NOT EXISTS idx_entities_entity_type ON entities(entity_type)"
        )

    async def _create_files_table(self):
        await self.pool.execute("""
            CREATE TABLE IF NOT EXISTS files (
                id SERIAL PRIMARY KEY,
                file_id VARCHAR(2048) UNIQUE NOT NULL,
                filename VARCHAR(255) NOT NULL,
                media_type VARCHAR(127) NOT NULL,
                size BIGINT NOT NULL,
                member_of VARCHAR(2048) NOT NULL,
                root_collection VARCHAR(2048) NOT NULL,
                content_license_id VARCHAR(2048) NOT NULL,
                meta JSONB,
                created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
        """)
        await self.pool.execute(
            "CREATE INDEX IF NOT EXISTS idx_files_member_of ON files(member_of)"
        )
