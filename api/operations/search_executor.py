"""
Executes a search and reconciles index hits with the record store.

The index only supplies identifiers, scores and highlights. Canonical
records are fetched from the store in one batch and run through the
entity pipeline, so search results carry exactly the same shape (and the
same access decisions) as /entity and /entities.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from domain_models import EntityRecord
from errors import SearchResponseError
from models import SearchRequest
from operations.search_compiler import GEOHASH_AGGREGATION, IDENTIFIER_FIELD, SearchQueryCompiler

logger = logging.getLogger(__name__)

SEARCH_EXTRA_FIELD = "searchExtra"


def extract_hits(response: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Return hits.hits, refusing to guess when the structure is missing"""
    hits = response.get("hits") if isinstance(response, Mapping) else None
    if not isinstance(hits, Mapping) or not isinstance(hits.get("hits"), list):
        raise SearchResponseError("Search response is missing hits.hits")
    return hits["hits"]


def hit_identifier(hit: Mapping[str, Any]) -> str:
    source = hit.get("_source") or {}
    identifier = source.get(IDENTIFIER_FIELD) or hit.get("_id")
    if not identifier:
        raise SearchResponseError("Search hit has no identifier")
    return identifier


def normalise_total(total: Any) -> int:
    """hits.total may be a bare number or {"value": n, "relation": ...}"""
    if isinstance(total, bool):
        return 0
    if isinstance(total, int):
        return total
    if isinstance(total, Mapping):
        return int(total.get("value") or 0)
    return 0


def reconcile(hits: Sequence[Mapping[str, Any]],
              records: Sequence[EntityRecord]) -> List[Tuple[Mapping[str, Any], EntityRecord]]:
    """Pair each hit with its store record, in hit order.

    Hits without a store record (index ahead of or behind the store) are
    dropped with a warning.
    """
    by_id = {record.rocrate_id: record for record in records}
    matched = []
    for hit in hits:
        identifier = hit_identifier(hit)
        record = by_id.get(identifier)
        if record is None:
            logger.warning(f"Search hit {identifier} has no record in the store, skipping")
            continue
        matched.append((hit, record))
    return matched


def merge_search_extra(entity: Dict[str, Any], hit: Mapping[str, Any]) -> Dict[str, Any]:
    """Attach score/highlight next to the transformed fields without replacing any"""
    extra = {"score": hit.get("_score"), "highlight": hit.get("highlight")}
    return {SEARCH_EXTRA_FIELD: extra, **entity}


def extract_facets(aggregations: Mapping[str, Any]) -> Dict[str, List[Dict[str, Any]]]:
    facets = {}
    for key, aggregation in aggregations.items():
        if key == GEOHASH_AGGREGATION:
            continue
        buckets = aggregation.get("buckets") if isinstance(aggregation, Mapping) else None
        if isinstance(buckets, list):
            facets[key] = [{"name": bucket["key"], "count": bucket["doc_count"]} for bucket in buckets]
    return facets


def extract_geohash_grid(aggregations: Mapping[str, Any]) -> Optional[Dict[str, int]]:
    aggregation = aggregations.get(GEOHASH_AGGREGATION)
    buckets = aggregation.get("buckets") if isinstance(aggregation, Mapping) else None
    if not buckets or not isinstance(buckets, list):
        return None
    return {bucket["key"]: bucket["doc_count"] for bucket in buckets}


class SearchExecutor:
    """Compile -> query the index -> fetch store records -> transform"""

    def __init__(self, search_client, entity_repository, pipeline,
                 compiler: SearchQueryCompiler, index: str = "entities"):
        self.client = search_client
        self.entities = entity_repository
        self.pipeline = pipeline
        self.compiler = compiler
        self.index = index

    async def execute(self, request: SearchRequest, context) -> Dict[str, Any]:
        compiled = self.compiler.compile(request)
        response = await self.client.search(index=self.index, body=compiled.to_body())

        hits = extract_hits(response)
        identifiers = list(dict.fromkeys(hit_identifier(hit) for hit in hits))
        records = await self.entities.find_by_ids(identifiers) if identifiers else []

        matched = reconcile(hits, records)
        transformed = await self.pipeline.run_many([record for _, record in matched], context)
        entities = [
            merge_search_extra(entity, hit)
            for (hit, _), entity in zip(matched, transformed)
        ]

        aggregations = response.get("aggregations") or {}
        result = {
            "total": normalise_total(response["hits"].get("total")),
            "searchTime": response.get("took"),
            "entities": entities,
        }

        facets = extract_facets(aggregations)
        if facets:
            result["facets"] = facets

        geohash_grid = extract_geohash_grid(aggregations)
        if geohash_grid is not None:
            result["geohashGrid"] = geohash_grid

        return result
