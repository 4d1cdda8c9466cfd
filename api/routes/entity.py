"""Single entity route."""
from fastapi import APIRouter, Request

from errors import ApiError, NotFoundError
from models import ERROR_RESPONSES
from routes.deps import get_app_state, request_context, require_uri, unexpected_error

router = APIRouter()


@router.get("/entity/{id:path}", responses=ERROR_RESPONSES)
async def get_entity(id: str, request: Request):
    """Get one entity, transformed through the entity pipeline

    Args:
        id: the entity's URI identifier (URL-encoded)
    """
    require_uri(id, "id")
    try:
        app_state = get_app_state(request)
        record = await app_state.get_store().entities.find_one(id)
        if record is None:
            raise NotFoundError("The requested entity was not found", id)
        return await app_state.get_entity_pipeline().run(record, request_context(request))
    except ApiError:
        raise
    except Exception as e:
        raise unexpected_error(request, e, "Failed to retrieve entity") from e
