"""Entity listing route."""
from typing import Optional

from fastapi import APIRouter, Query, Request

from domain_models import EntityFilter
from errors import ApiError
from models import DEFAULT_LIMIT, ERROR_RESPONSES, MAX_LIMIT, URI_PATTERN, EntitySort, SortOrder
from operations.entity_lister import EntityLister
from routes.deps import get_app_state, parse_entity_types, request_context, unexpected_error

router = APIRouter()


@router.get("/entities", responses=ERROR_RESPONSES)
async def list_entities(
    request: Request,
    member_of: Optional[str] = Query(None, alias="memberOf", pattern=URI_PATTERN),
    entity_type: Optional[str] = Query(None, alias="entityType",
                                       description="Comma-separated entity type URIs"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    offset: int = Query(0, ge=0),
    sort: EntitySort = "id",
    order: SortOrder = "asc",
):
    """List entities

    Returns {total, entities} where total counts every match, not just
    this page.
    """
    filter = EntityFilter(member_of=member_of, entity_types=parse_entity_types(entity_type))
    try:
        app_state = get_app_state(request)
        lister = EntityLister(app_state.get_store().entities, app_state.get_entity_pipeline())
        return await lister.list(filter, sort, order, limit, offset, request_context(request))
    except ApiError:
        raise
    except Exception as e:
        raise unexpected_error(request, e, "Failed to list entities") from e
