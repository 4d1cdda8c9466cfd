"""Route dependencies and helpers

Provides clean access to application state without Law of Demeter violations.
"""
import logging
import re
from typing import List, Optional

from fastapi import Request

from app_state import AppState
from domain_models import EntityType
from errors import InternalError, ValidationFailedError, internal_error
from models import URI_PATTERN
from value_objects import RequestContext

logger = logging.getLogger(__name__)

_URI = re.compile(URI_PATTERN)


def get_app_state(request: Request) -> AppState:
    """Get AppState from request

    Encapsulates the request.app.state.app_state chain.

    Usage:
        @router.get("/example")
        async def example(request: Request):
            app_state = get_app_state(request)
    """
    return request.app.state.app_state


def request_context(request: Request) -> RequestContext:
    """Context handed to transformers and content handlers"""
    return RequestContext(request=request, app_state=get_app_state(request))


def unexpected_error(request: Request, exc: Exception, message: str) -> InternalError:
    """Log an unexpected failure with its cause and build the 500 to raise"""
    logger.error(f"{message}: {exc}", exc_info=exc)
    expose = get_app_state(request).get_config().server.expose_error_details
    return internal_error(exc, message, expose)


def require_uri(value: str, field: str) -> str:
    """Reject identifiers that are not http(s) URIs"""
    if not _URI.match(value):
        raise ValidationFailedError(violations=[
            {"field": field, "message": "Must be an http(s) URI", "value": value}
        ])
    return value


def parse_entity_types(value: Optional[str]) -> Optional[List[str]]:
    """Split a comma-separated entityType list and check every URI is known"""
    if value is None:
        return None
    entity_types = [part.strip() for part in value.split(",") if part.strip()]
    unknown = [entity_type for entity_type in entity_types if entity_type not in EntityType.ALL]
    if unknown:
        raise ValidationFailedError(violations=[
            {"field": "entityType", "message": "Unknown entity type", "value": entity_type}
            for entity_type in unknown
        ])
    return entity_types or None
