"""Ordered transformation pipeline.

    base(record, references) -> access(standard, ctx) -> extra_1 -> ... -> extra_n

Stages may be sync or async; each one is awaited before the next runs.
The access stage is mandatory and checked when the pipeline is built, so
a misconfigured application fails at startup rather than per request.
"""
import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Sequence, Union

from async_helpers import maybe_await
from errors import ConfigurationError
from operations.reference_resolver import ReferenceResolver
from transform.base import References, base_entity_transformer, base_file_transformer
from value_objects import RequestContext

BaseTransformer = Callable[[Any, References], Any]


class AccessTransformer(Protocol):
    """Standard shape -> Authorised shape (adds the access block)"""

    def __call__(self, record: Dict[str, Any], context: RequestContext) -> Union[Dict[str, Any], Awaitable[Dict[str, Any]]]:
        ...


class Transformer(Protocol):
    """Authorised (or enriched) shape -> enriched superset"""

    def __call__(self, record: Dict[str, Any], context: RequestContext) -> Union[Dict[str, Any], Awaitable[Dict[str, Any]]]:
        ...


Stage = Callable[[Any, RequestContext], Any]


def compose(*stages: Stage) -> Callable[[Any, RequestContext], Awaitable[Any]]:
    """Chain stages left to right, awaiting each before the next"""

    async def composed(value: Any, context: RequestContext) -> Any:
        for stage in stages:
            value = await maybe_await(stage(value, context))
        return value

    return composed


class TransformPipeline:
    """Runs base -> access -> extras for one record or a batch.

    With resolve_references set, parent references are looked up once per
    batch and folded into memberOf/rootCollection by the base stage.
    """

    def __init__(self, base: BaseTransformer, access: Optional[AccessTransformer],
                 extras: Sequence[Transformer] = (), resolve_references: bool = False,
                 name: str = "record"):
        if access is None:
            raise ConfigurationError(f"{name} access transformer is required")
        if not callable(access):
            raise ConfigurationError(f"{name} access transformer must be callable")
        for extra in extras:
            if not callable(extra):
                raise ConfigurationError(f"{name} transformers must be callable, got {extra!r}")

        self.name = name
        self.base = base
        self.resolve_references = resolve_references
        self._authorise_and_enrich = compose(access, *extras)

    async def run(self, record: Any, context: RequestContext,
                  references: Optional[References] = None) -> Dict[str, Any]:
        """Transform a single record"""
        if references is None:
            references = await self._resolve([record], context)
        standard = self.base(record, references)
        return await self._authorise_and_enrich(standard, context)

    async def run_many(self, records: Sequence[Any], context: RequestContext) -> List[Dict[str, Any]]:
        """Transform a batch concurrently, preserving input order.

        Any stage failure aborts the whole batch and cancels the records
        still in flight; no record is dropped silently.
        """
        if not records:
            return []
        references = await self._resolve(records, context)
        tasks = [asyncio.create_task(self.run(record, context, references)) for record in records]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            # stop the sibling pipelines before propagating
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return list(results)

    async def _resolve(self, records: Sequence[Any], context: RequestContext) -> References:
        if not self.resolve_references:
            return {}
        resolver = ReferenceResolver(context.app_state.get_store().entities)
        return await resolver.resolve(records)


def entity_pipeline(access: Optional[AccessTransformer], extras: Sequence[Transformer] = ()) -> TransformPipeline:
    """Build the entity pipeline (parent references resolved)"""
    return TransformPipeline(base_entity_transformer, access, extras, resolve_references=True, name="entity")


def file_pipeline(access: Optional[AccessTransformer], extras: Sequence[Transformer] = ()) -> TransformPipeline:
    """Build the file pipeline (parents stay raw identifiers)"""
    return TransformPipeline(base_file_transformer, access, extras, name="file")
