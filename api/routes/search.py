"""Search route."""
from fastapi import APIRouter, Request

from errors import ApiError
from models import ERROR_RESPONSES, SearchRequest
from operations.search_compiler import SearchQueryCompiler
from operations.search_executor import SearchExecutor
from routes.deps import get_app_state, request_context, unexpected_error

router = APIRouter()


@router.post("/search", responses=ERROR_RESPONSES)
async def search(request_data: SearchRequest, request: Request):
    """
    Search entities

    Args:
        request_data: query, filters, viewport and paging
        request: FastAPI request for accessing app state

    Returns:
        {total, searchTime, entities, facets?, geohashGrid?}
    """
    try:
        app_state = get_app_state(request)
        search_config = app_state.get_config().search
        executor = SearchExecutor(
            app_state.get_search_client(),
            app_state.get_store().entities,
            app_state.get_entity_pipeline(),
            SearchQueryCompiler(search_config.facet_fields, search_config.facet_size),
            index=search_config.index,
        )
        return await executor.execute(request_data, request_context(request))
    except ApiError:
        raise
    except Exception as e:
        raise unexpected_error(request, e, "Search failed") from e
