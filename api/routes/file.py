"""File content routes."""
from typing import Optional

from fastapi import APIRouter, Query, Request

from errors import ApiError, NotFoundError
from models import ERROR_RESPONSES, Disposition
from operations.content_delivery import content_disposition
from routes.deps import get_app_state, request_context, unexpected_error

router = APIRouter()


async def _find_file(request: Request, id: str):
    record = await get_app_state(request).get_store().files.find_one(id)
    if record is None:
        raise NotFoundError("The requested file was not found", id)
    return record


@router.get("/file/{id:path}", responses=ERROR_RESPONSES)
async def get_file(
    id: str,
    request: Request,
    disposition: Disposition = "inline",
    filename: Optional[str] = None,
    no_redirect: bool = Query(False, alias="noRedirect"),
):
    """Download file content

    Args:
        disposition: inline (default) or attachment
        filename: overrides the stored filename in Content-Disposition
        noRedirect: answer redirects with 200 {"location": url} instead of 302
    """
    try:
        record = await _find_file(request, id)
        negotiator = get_app_state(request).get_file_negotiator()
        result = await negotiator.retrieve_content(record, id, request_context(request))

        header = content_disposition(disposition, filename or record.filename)
        return await negotiator.respond(result, no_redirect=no_redirect, disposition=header)
    except ApiError:
        raise
    except Exception as e:
        raise unexpected_error(request, e, "Failed to retrieve file") from e


@router.head("/file/{id:path}", responses=ERROR_RESPONSES)
async def head_file(id: str, request: Request):
    """File content headers only; the handler's head() is the only call made"""
    try:
        record = await _find_file(request, id)
        negotiator = get_app_state(request).get_file_negotiator()
        metadata = await negotiator.retrieve_metadata(record, id, request_context(request))
        return negotiator.head_response(metadata)
    except ApiError:
        raise
    except Exception as e:
        raise unexpected_error(request, e, "Failed to retrieve file metadata") from e
