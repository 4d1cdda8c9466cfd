"""
Pytest configuration and shared fixtures

Fixtures wire the in-memory fakes from the tests package into a complete
application.
"""
import pytest

from fastapi.testclient import TestClient

from config import Config
from domain_models import EntityType
from value_objects import FileMetadata
from tests import (
    COLLECTION_ID, OBJECT_ID, MEDIA_ID, ORPHAN_ID, DELETED_ID, FILE_ID,
    FakeHandler, FakeStore, make_entity, make_file, make_search_client,
)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def entities():
    """Collection -> object -> media object, plus an object whose parent was deleted"""
    return [
        make_entity(COLLECTION_ID, "Alpha collection", EntityType.COLLECTION, created=1, pk=1),
        make_entity(OBJECT_ID, "Bravo object", member_of=COLLECTION_ID,
                    root_collection=COLLECTION_ID, created=2, pk=2,
                    meta={'storagePath': 'object-1/ro-crate-metadata.json'}),
        make_entity(MEDIA_ID, "Charlie media", EntityType.MEDIA_OBJECT, member_of=OBJECT_ID,
                    root_collection=COLLECTION_ID, created=3, pk=3),
        make_entity(ORPHAN_ID, "Delta orphan", member_of=DELETED_ID,
                    root_collection=DELETED_ID, created=4, pk=4),
    ]


@pytest.fixture
def files():
    return [
        make_file(FILE_ID, "1.wav", pk=1),
        make_file("http://example.com/file/2.wav", "2.wav", member_of=MEDIA_ID, pk=2),
    ]


@pytest.fixture
def store(entities, files):
    return FakeStore(entities, files)


@pytest.fixture
def search_client():
    return make_search_client()


@pytest.fixture
def file_metadata():
    return FileMetadata(content_type="audio/wav", content_length=5)


@pytest.fixture
def file_handler(file_metadata):
    return FakeHandler(metadata=file_metadata)


@pytest.fixture
def rocrate_handler():
    return FakeHandler(metadata=FileMetadata(content_type="application/json", content_length=2))


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def app(config, store, search_client, file_handler, rocrate_handler):
    """Fully wired application with in-memory collaborators"""
    from app_factory import create_app
    from transform import all_public_access_transformer, all_public_file_access_transformer

    return create_app(
        access_transformer=all_public_access_transformer,
        file_access_transformer=all_public_file_access_transformer,
        file_handler=file_handler,
        rocrate_handler=rocrate_handler,
        config=config,
        store=store,
        search_client=search_client,
    )


@pytest.fixture
def client(app):
    """Test client; the context manager runs the application lifespan"""
    with TestClient(app) as test_client:
        yield test_client
