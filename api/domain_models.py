"""Domain models for catalogue records as stored in the record store"""
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional


class EntityType:
    """Known entity-type URIs"""
    COLLECTION = "http://pcdm.org/models#Collection"
    OBJECT = "http://pcdm.org/models#Object"
    MEDIA_OBJECT = "http://schema.org/MediaObject"
    PERSON = "http://schema.org/Person"

    ALL = (COLLECTION, OBJECT, MEDIA_OBJECT, PERSON)


def _json_bag(value) -> Dict[str, Any]:
    """Normalise the opaque metadata column (asyncpg returns json as str)"""
    if value is None:
        return {}
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)


@dataclass
class EntityRecord:
    """Canonical entity row.

    `id` is the store's numeric primary key; `rocrate_id` is the public
    URI identifier. `meta` is only ever read by content handlers.
    """
    id: int
    rocrate_id: str
    name: str
    description: str
    entity_type: str
    metadata_license_id: str
    content_license_id: str
    member_of: Optional[str] = None
    root_collection: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'EntityRecord':
        """Build from an asyncpg Record (or any mapping with column keys)"""
        return cls(
            id=row['id'],
            rocrate_id=row['rocrate_id'],
            name=row['name'],
            description=row['description'],
            entity_type=row['entity_type'],
            metadata_license_id=row['metadata_license_id'],
            content_license_id=row['content_license_id'],
            member_of=row['member_of'],
            root_collection=row['root_collection'],
            meta=_json_bag(row.get('meta')),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
        )


@dataclass
class FileRecord:
    """Canonical file row. member_of and root_collection are never null."""
    id: int
    file_id: str
    filename: str
    media_type: str
    size: int
    member_of: str
    root_collection: str
    content_license_id: str
    meta: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'FileRecord':
        """Build from an asyncpg Record (or any mapping with column keys)"""
        return cls(
            id=row['id'],
            file_id=row['file_id'],
            filename=row['filename'],
            media_type=row['media_type'],
            size=int(row['size']),
            member_of=row['member_of'],
            root_collection=row['root_collection'],
            content_license_id=row['content_license_id'],
            meta=_json_bag(row.get('meta')),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
        )


@dataclass(frozen=True)
class EntityFilter:
    """Listing filter for entities"""
    member_of: Optional[str] = None
    entity_types: Optional[List[str]] = None


@dataclass(frozen=True)
class FileFilter:
    """Listing filter for files"""
    member_of: Optional[str] = None
