"""
Tests for the entity routes

GET /entity/{id} and GET /entities through the real pipeline with an
in-memory store.
"""
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from app_factory import create_app
from domain_models import EntityType
from transform import all_public_access_transformer, all_public_file_access_transformer
from tests import COLLECTION_ID, MEDIA_ID, OBJECT_ID, ORPHAN_ID


def entity_url(rocrate_id):
    return f"/entity/{quote(rocrate_id, safe='')}"


class TestGetEntity:

    def test_returns_transformed_entity(self, client):
        response = client.get(entity_url(OBJECT_ID))

        assert response.status_code == 200
        data = response.json()
        assert data['id'] == OBJECT_ID
        assert data['memberOf'] == {'id': COLLECTION_ID, 'name': "Alpha collection"}
        assert data['rootCollection'] == {'id': COLLECTION_ID, 'name': "Alpha collection"}
        assert data['access'] == {'metadata': True, 'content': True}
        assert 'meta' not in data

    def test_collection_has_null_parents(self, client):
        data = client.get(entity_url(COLLECTION_ID)).json()

        assert data['memberOf'] is None
        assert data['rootCollection'] is None

    def test_deleted_parent_resolves_to_null(self, client):
        data = client.get(entity_url(ORPHAN_ID)).json()

        assert data['memberOf'] is None

    def test_not_found(self, client):
        missing = "http://example.com/missing"

        response = client.get(entity_url(missing))

        assert response.status_code == 404
        assert response.json() == {'error': {
            'code': 'NOT_FOUND',
            'message': "The requested entity was not found",
            'details': {'entityId': missing},
        }}

    def test_invalid_identifier_rejected_before_store(self, client, store):
        response = client.get("/entity/not-a-uri")

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'VALIDATION_ERROR'
        assert store.entities.calls == []


class TestListEntities:

    def test_default_listing(self, client):
        response = client.get("/entities")

        assert response.status_code == 200
        data = response.json()
        assert data['total'] == 4
        assert [e['id'] for e in data['entities']] == sorted(e['id'] for e in data['entities'])

    def test_pagination(self, client, store):
        data = client.get("/entities", params={'limit': 2, 'offset': 1}).json()

        assert data['total'] == 4
        assert len(data['entities']) == 2
        name, _, sort, order, limit, offset = store.entities.calls[0]
        assert (name, sort, order, limit, offset) == ('find_many', 'id', 'asc', 2, 1)

    def test_sort_name_desc(self, client):
        data = client.get("/entities", params={'sort': 'name', 'order': 'desc'}).json()

        names = [e['name'] for e in data['entities']]
        assert names == sorted(names, reverse=True)

    def test_member_of_filter(self, client):
        data = client.get("/entities", params={'memberOf': COLLECTION_ID}).json()

        assert data['total'] == 1
        assert data['entities'][0]['id'] == OBJECT_ID

    def test_entity_type_list(self, client):
        entity_type = f"{EntityType.COLLECTION},{EntityType.MEDIA_OBJECT}"

        data = client.get("/entities", params={'entityType': entity_type}).json()

        assert {e['id'] for e in data['entities']} == {COLLECTION_ID, MEDIA_ID}

    @pytest.mark.parametrize("params", [
        {'limit': 0},
        {'limit': 1001},
        {'offset': -1},
        {'sort': 'size'},
        {'order': 'sideways'},
        {'memberOf': 'not-a-uri'},
        {'entityType': 'http://example.com/Unknown'},
    ])
    def test_invalid_parameters_rejected_before_store(self, client, store, params):
        response = client.get("/entities", params=params)

        assert response.status_code == 400
        error = response.json()['error']
        assert error['code'] == 'VALIDATION_ERROR'
        assert error['details']['violations']
        assert store.entities.calls == []

    def test_violation_names_the_field(self, client):
        error = client.get("/entities", params={'limit': 0}).json()['error']

        assert error['details']['violations'][0]['field'] == 'limit'


class TestPipelineFailure:
    """One failing record aborts the whole listing with a 500"""

    @pytest.fixture
    def failing_app(self, config, store, search_client, file_handler, rocrate_handler):
        def explode(entity, context):
            if entity['id'] == MEDIA_ID:
                raise RuntimeError("enrichment backend down")
            return entity

        return create_app(
            access_transformer=all_public_access_transformer,
            file_access_transformer=all_public_file_access_transformer,
            file_handler=file_handler,
            rocrate_handler=rocrate_handler,
            entity_transformers=[explode],
            config=config,
            store=store,
            search_client=search_client,
        )

    def test_listing_fails_without_leaking_cause(self, failing_app):
        with TestClient(failing_app) as client:
            response = client.get("/entities")

        assert response.status_code == 500
        assert response.json() == {'error': {
            'code': 'INTERNAL_ERROR',
            'message': "Failed to list entities",
        }}

    def test_cause_exposed_when_configured(self, failing_app, config):
        config.server.expose_error_details = True

        with TestClient(failing_app) as client:
            response = client.get("/entities")

        assert response.json()['error']['details'] == {'reason': "enrichment backend down"}
