"""
Tests for the transformation pipeline

Stages run in order, may be sync or async, and batches keep input order.
"""
import asyncio

import pytest

from app_state import AppState
from config import Config
from errors import ConfigurationError
from transform import all_public_access_transformer, compose, entity_pipeline, file_pipeline
from transform.pipeline import TransformPipeline
from transform.base import base_entity_transformer
from value_objects import RequestContext
from tests import (
    COLLECTION_ID, DELETED_ID, FILE_ID, MEDIA_ID, OBJECT_ID, FakeStore, make_entity, make_file,
)


@pytest.fixture
def records():
    return [
        make_entity(COLLECTION_ID, "Alpha", pk=1),
        make_entity(OBJECT_ID, "Bravo", member_of=COLLECTION_ID, root_collection=COLLECTION_ID, pk=2),
        make_entity(MEDIA_ID, "Charlie", member_of=OBJECT_ID, root_collection=COLLECTION_ID, pk=3),
    ]


@pytest.fixture
def context(records):
    state = AppState(Config())
    state.core.store = FakeStore(records)
    return RequestContext(request=None, app_state=state)


class TestCompose:

    @pytest.mark.asyncio
    async def test_applies_stages_left_to_right(self):
        composed = compose(lambda v, c: v + ['a'], lambda v, c: v + ['b'])

        assert await composed([], None) == ['a', 'b']

    @pytest.mark.asyncio
    async def test_awaits_async_stages(self):
        async def slow(value, context):
            await asyncio.sleep(0)
            return value + 1

        composed = compose(slow, lambda v, c: v * 10)

        assert await composed(1, None) == 20

    @pytest.mark.asyncio
    async def test_passes_context_to_every_stage(self):
        seen = []
        composed = compose(lambda v, c: seen.append(c) or v, lambda v, c: seen.append(c) or v)

        await composed('x', 'ctx')

        assert seen == ['ctx', 'ctx']


class TestPipelineConfiguration:
    """A pipeline without an access stage must never be built"""

    def test_missing_access_transformer_fails_at_setup(self):
        with pytest.raises(ConfigurationError, match="access transformer is required"):
            entity_pipeline(None)

    def test_non_callable_access_transformer(self):
        with pytest.raises(ConfigurationError, match="must be callable"):
            file_pipeline("not a function")

    def test_non_callable_extra_stage(self):
        with pytest.raises(ConfigurationError):
            TransformPipeline(base_entity_transformer, all_public_access_transformer, extras=[42])


class TestPipelineRun:

    @pytest.mark.asyncio
    async def test_single_entity_gets_references_and_access(self, records, context):
        pipeline = entity_pipeline(all_public_access_transformer)

        result = await pipeline.run(records[1], context)

        assert result['memberOf'] == {'id': COLLECTION_ID, 'name': "Alpha"}
        assert result['access'] == {'metadata': True, 'content': True}

    @pytest.mark.asyncio
    async def test_extras_run_after_access_in_order(self, records, context):
        def add_count(entity, ctx):
            return {**entity, 'counts': {'files': 0}, 'order': ['count']}

        async def add_flag(entity, ctx):
            assert 'access' in entity
            return {**entity, 'order': entity['order'] + ['flag']}

        pipeline = entity_pipeline(all_public_access_transformer, [add_count, add_flag])

        result = await pipeline.run(records[0], context)

        assert result['order'] == ['count', 'flag']
        assert result['counts'] == {'files': 0}

    @pytest.mark.asyncio
    async def test_async_access_transformer(self, records, context):
        async def restricted(entity, ctx):
            return {**entity, 'access': {'metadata': True, 'content': False,
                                         'contentAuthorizationUrl': 'https://example.com/apply'}}

        result = await entity_pipeline(restricted).run(records[0], context)

        assert result['access']['content'] is False
        assert result['access']['contentAuthorizationUrl'] == 'https://example.com/apply'

    @pytest.mark.asyncio
    async def test_file_pipeline_does_not_touch_store(self, context):
        pipeline = file_pipeline(lambda f, c: {**f, 'access': {'content': True}})

        result = await pipeline.run(make_file(FILE_ID), context)

        assert result['memberOf'] == OBJECT_ID
        assert context.app_state.get_store().entities.calls == []


class TestPipelineRunMany:

    @pytest.mark.asyncio
    async def test_preserves_input_order(self, records, context):
        async def jitter(entity, ctx):
            # later records finish first
            await asyncio.sleep(0.01 if entity['id'] == COLLECTION_ID else 0)
            return entity

        pipeline = entity_pipeline(all_public_access_transformer, [jitter])

        results = await pipeline.run_many(records, context)

        assert [r['id'] for r in results] == [COLLECTION_ID, OBJECT_ID, MEDIA_ID]

    @pytest.mark.asyncio
    async def test_resolves_references_with_one_store_call(self, records, context):
        pipeline = entity_pipeline(all_public_access_transformer)

        await pipeline.run_many(records, context)

        calls = context.app_state.get_store().entities.calls
        assert calls == [('find_by_ids', [COLLECTION_ID, OBJECT_ID])]

    @pytest.mark.asyncio
    async def test_dangling_reference_is_null(self, context):
        orphan = make_entity("http://example.com/orphan", "Orphan", member_of=DELETED_ID)
        pipeline = entity_pipeline(all_public_access_transformer)

        [result] = await pipeline.run_many([orphan], context)

        assert result['memberOf'] is None

    @pytest.mark.asyncio
    async def test_empty_batch(self, context):
        pipeline = entity_pipeline(all_public_access_transformer)

        assert await pipeline.run_many([], context) == []
        assert context.app_state.get_store().entities.calls == []

    @pytest.mark.asyncio
    async def test_failing_record_aborts_batch(self, records, context):
        def explode_on_media(entity, ctx):
            if entity['id'] == MEDIA_ID:
                raise RuntimeError("enrichment failed")
            return entity

        pipeline = entity_pipeline(all_public_access_transformer, [explode_on_media])

        with pytest.raises(RuntimeError, match="enrichment failed"):
            await pipeline.run_many(records, context)

    @pytest.mark.asyncio
    async def test_failure_cancels_records_still_in_flight(self, records, context):
        cancelled, finished = [], []

        async def slow_unless_media(entity, ctx):
            if entity['id'] == MEDIA_ID:
                raise RuntimeError("enrichment failed")
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(entity['id'])
                raise
            finished.append(entity['id'])
            return entity

        pipeline = entity_pipeline(all_public_access_transformer, [slow_unless_media])

        with pytest.raises(RuntimeError, match="enrichment failed"):
            await asyncio.wait_for(pipeline.run_many(records, context), timeout=5)

        assert sorted(cancelled) == sorted([COLLECTION_ID, OBJECT_ID])
        assert finished == []
