"""
Value objects for the catalogue API.

Principles:
- Immutable data structures
- Named instead of primitive types
- The FileResult variants form a closed union; consumers dispatch on type
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import Request
    from app_state import AppState


@dataclass(frozen=True)
class FileMetadata:
    """Content headers describing a binary payload."""
    content_type: str
    content_length: int
    etag: Optional[str] = None
    last_modified: Optional[datetime] = None

    def with_content_type(self, content_type: str) -> 'FileMetadata':
        """Return a copy with the content type replaced."""
        return FileMetadata(
            content_type=content_type,
            content_length=self.content_length,
            etag=self.etag,
            last_modified=self.last_modified
        )


@dataclass(frozen=True)
class RedirectResult:
    """Content lives elsewhere; the client should be sent to url."""
    url: str


@dataclass(frozen=True)
class StreamResult:
    """Content is served from a byte stream owned by this response.

    stream may be a binary file object, a sync iterable of bytes or an
    async iterable of bytes. It is closed once the response is finished.
    """
    stream: Any
    metadata: FileMetadata


@dataclass(frozen=True)
class FilePathResult:
    """Content is a file on local disk.

    When accel_path is set the transfer is offloaded to the reverse proxy
    through an internal-redirect header and no bytes pass through the app.
    """
    path: str
    metadata: FileMetadata
    accel_path: Optional[str] = None


FileResult = Union[RedirectResult, StreamResult, FilePathResult]


@dataclass(frozen=True)
class RequestContext:
    """Per-request context handed to transformers and content handlers."""
    request: 'Request'
    app_state: 'AppState'
