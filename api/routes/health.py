"""Health and info routes."""
import logging

from fastapi import APIRouter, Request

from models import HealthResponse
from routes.deps import get_app_state

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", include_in_schema=False)
async def root(request: Request):
    """Root endpoint with API information"""
    return {
        "message": request.app.title,
        "version": request.app.version,
        "docs": "/docs",
        "health": "/health",
        "endpoints": ["/entity/{id}", "/entity/{id}/rocrate", "/entities", "/files", "/file/{id}", "/search"],
    }


@router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    """
    Health check endpoint

    Reports whether the search engine currently answers a ping. The
    service itself stays "healthy" while it can answer this request.
    """
    app_state = get_app_state(request)
    client = app_state.get_search_client()

    reachable = False
    if client is not None:
        try:
            reachable = bool(await client.ping())
        except Exception as e:
            logger.warning(f"Search engine ping failed: {e}")

    return HealthResponse(
        status="healthy" if reachable else "degraded",
        search=reachable,
        version=request.app.version,
    )
