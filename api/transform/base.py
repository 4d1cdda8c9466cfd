"""Base transformers and the public record shapes.

The base stage is fixed and pure. Its output (StandardEntity /
StandardFile) is the only shape custom transformers may rely on.
"""
from typing import Any, Mapping, Optional, TypedDict, Union

from domain_models import EntityRecord, FileRecord


class EntityReference(TypedDict):
    id: str
    name: str


class StandardEntity(TypedDict):
    id: str
    name: str
    description: str
    entityType: str
    memberOf: Optional[EntityReference]
    rootCollection: Optional[EntityReference]
    metadataLicenseId: str
    contentLicenseId: str


class _ContentAuthorization(TypedDict, total=False):
    contentAuthorizationUrl: str


class EntityAccess(_ContentAuthorization):
    metadata: bool
    content: bool


class FileAccess(_ContentAuthorization):
    content: bool


class AuthorisedEntity(StandardEntity):
    access: EntityAccess


class StandardFile(TypedDict):
    id: str
    filename: str
    mediaType: str
    size: int
    memberOf: str
    rootCollection: str
    contentLicenseId: str


class AuthorisedFile(StandardFile):
    access: FileAccess


References = Mapping[str, EntityReference]


def _reference(value: Any, references: References) -> Optional[EntityReference]:
    """Resolve a raw parent identifier into a reference.

    Already-resolved references pass through, so the base stage is
    idempotent on its own output. Unknown identifiers become None.
    """
    if value is None:
        return None
    if isinstance(value, Mapping):
        return {'id': value['id'], 'name': value['name']}
    resolved = references.get(value)
    if resolved is None:
        return None
    return {'id': resolved['id'], 'name': resolved['name']}


def base_entity_transformer(entity: Union[EntityRecord, Mapping[str, Any]],
                            references: Optional[References] = None) -> StandardEntity:
    """Transform a stored entity (or a StandardEntity) into StandardEntity"""
    references = references or {}

    if isinstance(entity, EntityRecord):
        return {
            'id': entity.rocrate_id,
            'name': entity.name,
            'description': entity.description,
            'entityType': entity.entity_type,
            'memberOf': _reference(entity.member_of, references),
            'rootCollection': _reference(entity.root_collection, references),
            'metadataLicenseId': entity.metadata_license_id,
            'contentLicenseId': entity.content_license_id,
        }

    return {
        'id': entity['id'],
        'name': entity['name'],
        'description': entity['description'],
        'entityType': entity['entityType'],
        'memberOf': _reference(entity.get('memberOf'), references),
        'rootCollection': _reference(entity.get('rootCollection'), references),
        'metadataLicenseId': entity['metadataLicenseId'],
        'contentLicenseId': entity['contentLicenseId'],
    }


def base_file_transformer(file: Union[FileRecord, Mapping[str, Any]],
                          references: Optional[References] = None) -> StandardFile:
    """Transform a stored file (or a StandardFile) into StandardFile.

    File parents stay raw identifiers; references is accepted so both base
    stages share one signature.
    """
    if isinstance(file, FileRecord):
        return {
            'id': file.file_id,
            'filename': file.filename,
            'mediaType': file.media_type,
            'size': file.size,
            'memberOf': file.member_of,
            'rootCollection': file.root_collection,
            'contentLicenseId': file.content_license_id,
        }

    return {
        'id': file['id'],
        'filename': file['filename'],
        'mediaType': file['mediaType'],
        'size': int(file['size']),
        'memberOf': file['memberOf'],
        'rootCollection': file['rootCollection'],
        'contentLicenseId': file['contentLicenseId'],
    }
