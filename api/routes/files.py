"""File listing route."""
from typing import Optional

from fastapi import APIRouter, Query, Request

from domain_models import FileFilter
from errors import ApiError
from models import DEFAULT_LIMIT, ERROR_RESPONSES, MAX_LIMIT, URI_PATTERN, FileSort, SortOrder
from operations.file_lister import FileLister
from routes.deps import get_app_state, request_context, unexpected_error

router = APIRouter()


@router.get("/files", responses=ERROR_RESPONSES)
async def list_files(
    request: Request,
    member_of: Optional[str] = Query(None, alias="memberOf", pattern=URI_PATTERN),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    offset: int = Query(0, ge=0),
    sort: FileSort = "id",
    order: SortOrder = "asc",
):
    """List files, optionally restricted to one parent"""
    try:
        app_state = get_app_state(request)
        lister = FileLister(app_state.get_store().files, app_state.get_file_pipeline())
        return await lister.list(FileFilter(member_of=member_of), sort, order, limit, offset,
                                 request_context(request))
    except ApiError:
        raise
    except Exception as e:
        raise unexpected_error(request, e, "Failed to list files") from e
