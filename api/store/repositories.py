"""
PostgreSQL repositories for catalogue records.

Read-only from the API's point of view: records are written by external
ingestion. Sort keys come from a whitelist, never from raw input.
"""
from typing import Any, Dict, List, Optional, Sequence

from domain_models import EntityFilter, EntityRecord, FileFilter, FileRecord


ENTITY_COLUMNS = (
    "id, rocrate_id, name, description, entity_type, member_of, root_collection, "
    "metadata_license_id, content_license_id, meta, created_at, updated_at"
)
FILE_COLUMNS = (
    "id, file_id, filename, media_type, size, member_of, root_collection, "
    "content_license_id, meta, created_at, updated_at"
)

ENTITY_SORT_COLUMNS = {
    'id': 'rocrate_id',
    'name': 'name',
    'createdAt': 'created_at',
    'updatedAt': 'updated_at',
}
FILE_SORT_COLUMNS = {
    'id': 'file_id',
    'filename': 'filename',
    'createdAt': 'created_at',
    'updatedAt': 'updated_at',
}


class WhereClause:
    """Accumulates AND-ed conditions with numbered asyncpg placeholders"""

    def __init__(self):
        self.conditions: List[str] = []
        self.params: List[Any] = []

    def add(self, template: str, value: Any):
        """Add a condition; {} in template is replaced by the placeholder"""
        self.params.append(value)
        self.conditions.append(template.format(f"${len(self.params)}"))

    def placeholders_after(self, count: int) -> List[str]:
        """Placeholders for count values appended after the condition params"""
        start = len(self.params) + 1
        return [f"${n}" for n in range(start, start + count)]

    def __str__(self) -> str:
        if not self.conditions:
            return ""
        return " WHERE " + " AND ".join(self.conditions)


def order_clause(columns: Dict[str, str], sort: str, order: str, tie_breaker: str) -> str:
    """Build ORDER BY from whitelisted keys; ties broken by the identifier"""
    if sort not in columns:
        raise ValueError(f"Unsupported sort key: {sort!r}")
    direction = "DESC" if order == "desc" else "ASC"
    column = columns[sort]
    if column == tie_breaker:
        return f"{column} {direction}"
    return f"{column} {direction}, {tie_breaker} ASC"


class EntityRepository:
    """Queries against the entities table."""

    def __init__(self, pool):
        self.pool = pool

    async def find_one(self, rocrate_id: str) -> Optional[EntityRecord]:
        """Get entity by its public identifier"""
        row = await self.pool.fetchrow(
            f"SELECT {ENTITY_COLUMNS} FROM entities WHERE rocrate_id = $1",
            rocrate_id
        )
        return EntityRecord.from_row(row) if row else None

    async def find_by_ids(self, rocrate_ids: Sequence[str]) -> List[EntityRecord]:
        """Get all entities whose identifier is in rocrate_ids (one round trip)"""
        if not rocrate_ids:
            return []
        rows = await self.pool.fetch(
            f"SELECT {ENTITY_COLUMNS} FROM entities WHERE rocrate_id = ANY($1::text[])",
            list(rocrate_ids)
        )
        return [EntityRecord.from_row(row) for row in rows]

    async def find_many(self, filter: EntityFilter, sort: str = 'id', order: str = 'asc',
                        limit: int = 100, offset: int = 0) -> List[EntityRecord]:
        """Filtered, sorted, paginated listing"""
        where = self._where(filter)
        order_by = order_clause(ENTITY_SORT_COLUMNS, sort, order, tie_breaker='rocrate_id')
        limit_ph, offset_ph = where.placeholders_after(2)
        rows = await self.pool.fetch(
            f"SELECT {ENTITY_COLUMNS} FROM entities{where} "
            f"ORDER BY {order_by} LIMIT {limit_ph} OFFSET {offset_ph}",
            *where.params, limit, offset
        )
        return [EntityRecord.from_row(row) for row in rows]

    async def count(self, filter: EntityFilter) -> int:
        """Count entities matching filter"""
        where = self._where(filter)
        return await self.pool.fetchval(f"SELECT COUNT(*) FROM entities{where}", *where.params)

    @staticmethod
    def _where(filter: EntityFilter) -> WhereClause:
        where = WhereClause()
        if filter.member_of:
            where.add("member_of = {}", filter.member_of)
        if filter.entity_types:
            where.add("entity_type = ANY({}::text[])", list(filter.entity_types))
        return where


class FileRepository:
    """Queries against the files table."""

    def __init__(self, pool):
        self.pool = pool

    async def find_one(self, file_id: str) -> Optional[FileRecord]:
        """Get file by its public identifier"""
        row = await self.pool.fetchrow(
            f"SELECT {FILE_COLUMNS} FROM files WHERE file_id = $1",
            file_id
        )
        return FileRecord.from_row(row) if row else None

    async def find_many(self, filter: FileFilter, sort: str = 'id', order: str = 'asc',
                        limit: int = 100, offset: int = 0) -> List[FileRecord]:
        """Filtered, sorted, paginated listing"""
        where = self._where(filter)
        order_by = order_clause(FILE_SORT_COLUMNS, sort, order, tie_breaker='file_id')
        limit_ph, offset_ph = where.placeholders_after(2)
        rows = await self.pool.fetch(
            f"SELECT {FILE_COLUMNS} FROM files{where} "
            f"ORDER BY {order_by} LIMIT {limit_ph} OFFSET {offset_ph}",
            *where.params, limit, offset
        )
        return [FileRecord.from_row(row) for row in rows]

    async def count(self, filter: FileFilter) -> int:
        """Count files matching filter"""
        where = self._where(filter)
        return await self.pool.fetchval(f"SELECT COUNT(*) FROM files{where}", *where.params)

    @staticmethod
    def _where(filter: FileFilter) -> WhereClause:
        where = WhereClause()
        if filter.member_of:
            where.add("member_of = {}", filter.member_of)
        return where


class CatalogueStore:
    """Entity and file repositories sharing one pool."""

    def __init__(self, pool):
        self.pool = pool
        self.entities = EntityRepository(pool)
        self.files = FileRepository(pool)

    async def close(self):
        await self.pool.close()
