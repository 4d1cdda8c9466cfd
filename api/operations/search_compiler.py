"""
Compiles a SearchRequest into an OpenSearch request body.

Query shape:

    bool
      must:   multi_match (basic, fuzzy) | query_string (advanced, AND)
      filter: terms per requested field, geo_bounding_box

Filter clauses never contribute to scoring. Aggregations always include
the configured terms facets; a geohash grid is added only when both a
precision and a bounding box are supplied.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from config import DEFAULT_FACET_FIELDS
from models import BoundingBox, SearchRequest

SEARCH_FIELDS = ["name^2", "description"]
HIGHLIGHT_FIELDS = ("name", "description")
GEO_FIELD = "location"
GEOHASH_AGGREGATION = "geohash_grid"
IDENTIFIER_FIELD = "rocrateId"

# Public sort key -> index field. "relevance" has no entry: the engine's
# native score ordering applies when no sort clause is sent.
SORT_FIELDS = {
    "id": IDENTIFIER_FIELD,
    "name": "name.keyword",
    "createdAt": "createdAt",
    "updatedAt": "updatedAt",
}


@dataclass(frozen=True)
class CompiledSearch:
    """Everything the engine needs for one search call"""
    query: Dict[str, Any]
    aggregations: Dict[str, Any]
    sort: Optional[List[Dict[str, str]]]
    offset: int
    limit: int

    def to_body(self) -> Dict[str, Any]:
        body = {
            "query": self.query,
            "aggs": self.aggregations,
            "highlight": {"fields": {field: {} for field in HIGHLIGHT_FIELDS}},
            "_source": [IDENTIFIER_FIELD],
            "from": self.offset,
            "size": self.limit,
        }
        if self.sort is not None:
            body["sort"] = self.sort
        return body


def geo_corners(box: BoundingBox) -> Dict[str, Dict[str, float]]:
    """Normalise a viewport into the engine's top_left/bottom_right corners.

    Latitudes are ordered so the northern one is always "top" whichever
    corner the caller labelled topRight. Longitudes keep their west/east
    labels since a box crossing the antimeridian has west > east.
    """
    north = max(box.top_right.lat, box.bottom_left.lat)
    south = min(box.top_right.lat, box.bottom_left.lat)
    return {
        "top_left": {"lat": north, "lon": box.bottom_left.lng},
        "bottom_right": {"lat": south, "lon": box.top_right.lng},
    }


class SearchQueryCompiler:
    """Builds query, aggregations and sort for a SearchRequest"""

    def __init__(self, facet_fields: Sequence[str] = DEFAULT_FACET_FIELDS, facet_size: int = 20):
        self.facet_fields = tuple(facet_fields)
        self.facet_size = facet_size

    def compile(self, request: SearchRequest) -> CompiledSearch:
        return CompiledSearch(
            query=self.build_query(request),
            aggregations=self.build_aggregations(request),
            sort=self.build_sort(request.sort, request.order),
            offset=request.offset,
            limit=request.limit,
        )

    def build_query(self, request: SearchRequest) -> Dict[str, Any]:
        must = [self._text_clause(request.search_type, request.query)]
        filters = []

        for field, values in (request.filters or {}).items():
            filters.append({"terms": {field: list(values)}})

        if request.bounding_box:
            filters.append({"geo_bounding_box": {GEO_FIELD: geo_corners(request.bounding_box)}})

        return {"bool": {"must": must, "filter": filters}}

    def build_aggregations(self, request: SearchRequest) -> Dict[str, Any]:
        aggs = {
            field: {"terms": {"field": field, "size": self.facet_size}}
            for field in self.facet_fields
        }

        if request.geohash_precision and request.bounding_box:
            aggs[GEOHASH_AGGREGATION] = {
                "geohash_grid": {
                    "field": GEO_FIELD,
                    "precision": request.geohash_precision,
                    "bounds": geo_corners(request.bounding_box),
                }
            }

        return aggs

    @staticmethod
    def build_sort(sort: str, order: str) -> Optional[List[Dict[str, str]]]:
        if sort == "relevance":
            return None
        if sort not in SORT_FIELDS:
            raise ValueError(f"Unsupported sort key: {sort!r}")
        return [{SORT_FIELDS[sort]: order}]

    @staticmethod
    def _text_clause(search_type: str, query: str) -> Dict[str, Any]:
        if search_type == "advanced":
            return {
                "query_string": {
                    "query": query,
                    "fields": list(SEARCH_FIELDS),
                    "default_operator": "AND",
                }
            }
        return {
            "multi_match": {
                "query": query,
                "fields": list(SEARCH_FIELDS),
                "type": "best_fields",
                "fuzziness": "AUTO",
            }
        }
