"""Test package for the catalogue API

Shared test utilities: record builders and in-memory fakes for the record
store, the search client and the content handlers.
"""
import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock

# Add api directory to path for imports
# Detect if running in Docker (./api:/app mount) vs host (./api exists)
api_path = Path(__file__).parent.parent / "api"
if not api_path.exists():
    # Running in Docker where api contents are at /app directly
    api_path = Path(__file__).parent.parent
sys.path.insert(0, str(api_path))

from domain_models import EntityRecord, EntityType, FileRecord


COLLECTION_ID = "http://example.com/collection/1"
OBJECT_ID = "http://example.com/object/1"
MEDIA_ID = "http://example.com/media/1"
ORPHAN_ID = "http://example.com/object/orphan"
DELETED_ID = "http://example.com/collection/deleted"
FILE_ID = "http://example.com/file/1.wav"


def make_entity(rocrate_id, name, entity_type=EntityType.OBJECT, member_of=None,
                root_collection=None, created=1, meta=None, pk=1):
    """Build an EntityRecord with sensible defaults"""
    return EntityRecord(
        id=pk,
        rocrate_id=rocrate_id,
        name=name,
        description=f"Description of {name}",
        entity_type=entity_type,
        metadata_license_id="http://example.com/license/cc-by",
        content_license_id="http://example.com/license/cc-by",
        member_of=member_of,
        root_collection=root_collection,
        meta=meta or {},
        created_at=datetime(2024, 1, created, tzinfo=timezone.utc),
        updated_at=datetime(2024, 2, created, tzinfo=timezone.utc),
    )


def make_file(file_id, filename="1.wav", member_of=OBJECT_ID, size=1024, meta=None, pk=1):
    """Build a FileRecord with sensible defaults"""
    return FileRecord(
        id=pk,
        file_id=file_id,
        filename=filename,
        media_type="audio/wav",
        size=size,
        member_of=member_of,
        root_collection=COLLECTION_ID,
        content_license_id="http://example.com/license/cc-by",
        meta=meta or {},
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


_SORT_ATTRIBUTES = {
    'id': 'rocrate_id',
    'name': 'name',
    'filename': 'filename',
    'createdAt': 'created_at',
    'updatedAt': 'updated_at',
}


class FakeEntityRepository:
    """In-memory EntityRepository recording every call"""

    def __init__(self, records=()):
        self.records = {record.rocrate_id: record for record in records}
        self.calls = []

    async def find_one(self, rocrate_id):
        self.calls.append(('find_one', rocrate_id))
        return self.records.get(rocrate_id)

    async def find_by_ids(self, rocrate_ids):
        self.calls.append(('find_by_ids', list(rocrate_ids)))
        return [self.records[i] for i in rocrate_ids if i in self.records]

    async def find_many(self, filter, sort='id', order='asc', limit=100, offset=0):
        self.calls.append(('find_many', filter, sort, order, limit, offset))
        matches = self._matching(filter)
        attribute = _SORT_ATTRIBUTES[sort]
        matches.sort(key=lambda record: (getattr(record, attribute), record.rocrate_id),
                     reverse=(order == 'desc'))
        return matches[offset:offset + limit]

    async def count(self, filter):
        self.calls.append(('count', filter))
        return len(self._matching(filter))

    def _matching(self, filter):
        matches = list(self.records.values())
        if filter.member_of:
            matches = [r for r in matches if r.member_of == filter.member_of]
        if filter.entity_types:
            matches = [r for r in matches if r.entity_type in filter.entity_types]
        return matches


class FakeFileRepository:
    """In-memory FileRepository recording every call"""

    def __init__(self, records=()):
        self.records = {record.file_id: record for record in records}
        self.calls = []

    async def find_one(self, file_id):
        self.calls.append(('find_one', file_id))
        return self.records.get(file_id)

    async def find_many(self, filter, sort='id', order='asc', limit=100, offset=0):
        self.calls.append(('find_many', filter, sort, order, limit, offset))
        matches = [r for r in self.records.values()
                   if not filter.member_of or r.member_of == filter.member_of]
        attribute = 'file_id' if sort == 'id' else _SORT_ATTRIBUTES[sort]
        matches.sort(key=lambda record: getattr(record, attribute), reverse=(order == 'desc'))
        return matches[offset:offset + limit]

    async def count(self, filter):
        self.calls.append(('count', filter))
        return len([r for r in self.records.values()
                    if not filter.member_of or r.member_of == filter.member_of])


class FakeStore:
    """CatalogueStore stand-in"""

    def __init__(self, entities=(), files=()):
        self.entities = FakeEntityRepository(entities)
        self.files = FakeFileRepository(files)
        self.close = AsyncMock()


class FakeHandler:
    """Content handler returning fixed results and recording calls"""

    def __init__(self, result=False, metadata=False):
        self.result = result
        self.metadata = metadata
        self.get_calls = []
        self.head_calls = []

    async def get(self, record, context):
        self.get_calls.append(record)
        return self.result

    async def head(self, record, context):
        self.head_calls.append(record)
        return self.metadata


def search_response(hits=(), total=None, took=3, aggregations=None):
    """Build an OpenSearch-shaped response body"""
    hits = list(hits)
    return {
        'took': took,
        'hits': {
            'total': {'value': len(hits) if total is None else total, 'relation': 'eq'},
            'hits': hits,
        },
        'aggregations': aggregations or {},
    }


def search_hit(rocrate_id, score=1.0, highlight=None):
    hit = {'_id': rocrate_id, '_score': score, '_source': {'rocrateId': rocrate_id}}
    if highlight is not None:
        hit['highlight'] = highlight
    return hit


def make_search_client(response=None):
    """AsyncOpenSearch stand-in"""
    client = AsyncMock()
    client.search = AsyncMock(return_value=response or search_response())
    client.ping = AsyncMock(return_value=True)
    client.close = AsyncMock()
    return client


