"""
Error taxonomy and the standard error envelope.

Every error leaving the API is rendered as:

    {"error": {"code": ..., "message": ..., "details": {...}}}

`details` is omitted when there is nothing to add.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

VALIDATION_ERROR = "VALIDATION_ERROR"
NOT_FOUND = "NOT_FOUND"
INTERNAL_ERROR = "INTERNAL_ERROR"
RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
INVALID_REQUEST = "INVALID_REQUEST"


class ConfigurationError(Exception):
    """Raised while building the application, never per request"""


class SearchResponseError(Exception):
    """The search engine answered with a body that breaks its contract"""


class ApiError(Exception):
    """Base exception for errors rendered with the standard envelope"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        code: str = INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Render the error envelope"""
        error = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return {"error": error}


class ValidationFailedError(ApiError):
    """Request failed validation before any collaborator was called"""

    def __init__(self, message: str = "The request parameters are invalid",
                 violations: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            code=VALIDATION_ERROR,
            details={"violations": violations} if violations else None
        )


class InvalidRequestError(ApiError):
    """Request is well-formed but cannot be served"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(
            message=message,
            status_code=status_code,
            code=INVALID_REQUEST,
            details=details
        )


class NotFoundError(ApiError):
    """No matching record, or the handler reported the content unavailable"""

    def __init__(self, message: str, entity_id: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            code=NOT_FOUND,
            details={"entityId": entity_id} if entity_id else None
        )


class RateLimitError(ApiError):
    """Raised when a client exceeds its request allowance"""

    def __init__(self, retry_after: int):
        super().__init__(
            message="Rate limit exceeded. Please retry after the specified time.",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            code=RATE_LIMIT_EXCEEDED,
            details={"retryAfter": retry_after}
        )


class InternalError(ApiError):
    """Generic 500; the cause is logged, not returned"""

    def __init__(self, message: str = "Internal server error",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, details=details)


def internal_error(exc: Exception, message: str = "Internal server error",
                   expose_details: bool = False) -> InternalError:
    """Convert an unexpected exception into an InternalError.

    The exception text is only echoed when expose_details is set
    (non-production escape hatch).
    """
    details = {"reason": str(exc)} if expose_details else None
    return InternalError(message, details=details)


def _violations(exc: RequestValidationError) -> List[Dict[str, Any]]:
    violations = []
    for issue in exc.errors():
        location = [str(part) for part in issue.get("loc", ()) if part not in ("body", "query", "path")]
        violation = {
            "field": ".".join(location),
            "message": issue.get("msg", "Invalid value"),
        }
        if "input" in issue and isinstance(issue["input"], (str, int, float, bool)):
            violation["value"] = issue["input"]
        violations.append(violation)
    return violations


async def api_error_handler(request: Request, exc: ApiError):
    """Render ApiError subclasses"""
    headers = None
    if isinstance(exc, RateLimitError):
        headers = {"Retry-After": str(exc.details["retryAfter"])}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Render framework validation failures as VALIDATION_ERROR"""
    error = ValidationFailedError(violations=_violations(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Render routing errors (unknown path, wrong method) with the envelope"""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        error = ApiError(str(exc.detail), status_code=exc.status_code, code=NOT_FOUND)
    elif exc.status_code == status.HTTP_429_TOO_MANY_REQUESTS:
        error = ApiError(str(exc.detail), status_code=exc.status_code, code=RATE_LIMIT_EXCEEDED)
    else:
        error = InvalidRequestError(str(exc.detail), status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=error.to_dict(),
                        headers=getattr(exc, "headers", None))


def register_error_handlers(app: FastAPI):
    """Install the envelope renderers on the application"""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
