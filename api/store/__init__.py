"""Record store access (PostgreSQL via asyncpg).

- Connection pool lifecycle (PostgresConnection)
- Development schema bootstrap (SchemaManager)
- Entity and file repositories (CatalogueStore)
"""

from .connection import PostgresConnection
from .repositories import CatalogueStore, EntityRepository, FileRepository
from .schema import SchemaManager

__all__ = ['PostgresConnection', 'CatalogueStore', 'EntityRepository', 'FileRepository', 'SchemaManager']
