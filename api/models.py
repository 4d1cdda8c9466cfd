from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SortOrder = Literal["asc", "desc"]
EntitySort = Literal["id", "name", "createdAt", "updatedAt"]
FileSort = Literal["id", "filename", "createdAt", "updatedAt"]
SearchSort = Literal["id", "name", "createdAt", "updatedAt", "relevance"]
SearchType = Literal["basic", "advanced"]
Disposition = Literal["inline", "attachment"]

# Pagination bounds shared by listings and search
MAX_LIMIT = 1000
DEFAULT_LIMIT = 100

URI_PATTERN = r"^https?://.+"


class LatLng(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class BoundingBox(BaseModel):
    """Two opposite corners of a map viewport"""
    model_config = ConfigDict(populate_by_name=True)

    top_right: LatLng = Field(..., alias="topRight")
    bottom_left: LatLng = Field(..., alias="bottomLeft")


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    search_type: SearchType = Field(default="basic", alias="searchType",
                                    description="basic = fuzzy match, advanced = boolean query string")
    query: str = Field(..., description="The query text to search for")
    filters: Optional[Dict[str, List[str]]] = Field(default=None, description="Exact-match field filters")
    bounding_box: Optional[BoundingBox] = Field(default=None, alias="boundingBox")
    geohash_precision: int = Field(default=5, ge=0, le=12, alias="geohashPrecision")
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)
    offset: int = Field(default=0, ge=0)
    sort: SearchSort = "relevance"
    order: SortOrder = "asc"


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    error: ErrorBody


class HealthResponse(BaseModel):
    status: str
    search: bool
    version: str


class RedirectLocation(BaseModel):
    """Body returned instead of a 302 when noRedirect is requested"""
    location: str


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request parameters"},
    404: {"model": ErrorResponse, "description": "Record or content not found"},
    500: {"model": ErrorResponse, "description": "Internal error"},
}
