"""RO-Crate metadata document routes."""
from fastapi import APIRouter, Query, Request

from errors import ApiError, NotFoundError
from models import ERROR_RESPONSES
from routes.deps import get_app_state, request_context, require_uri, unexpected_error

router = APIRouter()


async def _find_entity(request: Request, id: str):
    require_uri(id, "id")
    record = await get_app_state(request).get_store().entities.find_one(id)
    if record is None:
        raise NotFoundError("The requested entity was not found", id)
    return record


@router.get("/entity/{id:path}/rocrate", responses=ERROR_RESPONSES)
async def get_rocrate(
    id: str,
    request: Request,
    no_redirect: bool = Query(False, alias="noRedirect"),
):
    """RO-Crate metadata document of an entity (application/ld+json)"""
    try:
        record = await _find_entity(request, id)
        negotiator = get_app_state(request).get_rocrate_negotiator()
        result = await negotiator.retrieve_content(record, id, request_context(request))
        return await negotiator.respond(result, no_redirect=no_redirect)
    except ApiError:
        raise
    except Exception as e:
        raise unexpected_error(request, e, "Failed to retrieve RO-Crate") from e


@router.head("/entity/{id:path}/rocrate", responses=ERROR_RESPONSES)
async def head_rocrate(id: str, request: Request):
    try:
        record = await _find_entity(request, id)
        negotiator = get_app_state(request).get_rocrate_negotiator()
        metadata = await negotiator.retrieve_metadata(record, id, request_context(request))
        return negotiator.head_response(metadata)
    except ApiError:
        raise
    except Exception as e:
        raise unexpected_error(request, e, "Failed to retrieve RO-Crate metadata") from e
