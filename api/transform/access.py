"""Stock access transformers.

WARNING: these grant full access to everything. Use them only for fully
public datasets; repositories with restricted content must supply their
own access transformer that checks the requester's permissions.
"""
from transform.base import AuthorisedEntity, AuthorisedFile, StandardEntity, StandardFile


def all_public_access_transformer(entity: StandardEntity, context=None) -> AuthorisedEntity:
    """Grant metadata and content access to every entity"""
    return {
        **entity,
        'access': {
            'metadata': True,
            'content': True,
        },
    }


def all_public_file_access_transformer(file: StandardFile, context=None) -> AuthorisedFile:
    """Grant content access to every file (file metadata is always public)"""
    return {
        **file,
        'access': {
            'content': True,
        },
    }
