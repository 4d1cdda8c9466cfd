"""
Content delivery for file downloads and RO-Crate metadata documents.

Handlers know where content lives; this module only turns their
FileResult into HTTP:

- RedirectResult  -> 302 + Location, or 200 {"location": url} with noRedirect
- StreamResult    -> content headers + streamed body (stream always closed)
- FilePathResult  -> X-Accel-Redirect + empty body when accel_path is set,
                     otherwise the file is streamed from disk

A handler returning False means "not available right now" (404). A
handler raising is an infrastructure failure and propagates (500).
"""
import asyncio
import os
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any, AsyncIterator, Dict, Optional
from urllib.parse import quote

from starlette.concurrency import iterate_in_threadpool
from starlette.responses import FileResponse, JSONResponse, RedirectResponse, Response, StreamingResponse

from async_helpers import maybe_await
from errors import NotFoundError
from value_objects import FileMetadata, FilePathResult, RedirectResult, StreamResult


ACCEL_REDIRECT_HEADER = "X-Accel-Redirect"
STREAM_CHUNK_SIZE = 64 * 1024


def http_date(value: datetime) -> str:
    """RFC 7231 date; naive datetimes are taken as UTC"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def metadata_headers(metadata: FileMetadata, include_length: bool = True) -> Dict[str, str]:
    headers = {"Content-Type": metadata.content_type}
    if include_length:
        headers["Content-Length"] = str(metadata.content_length)
    if metadata.etag:
        headers["ETag"] = metadata.etag
    if metadata.last_modified:
        headers["Last-Modified"] = http_date(metadata.last_modified)
    return headers


def content_disposition(disposition: str, filename: str) -> str:
    """inline/attachment header; non-ASCII names use RFC 5987 filename*"""
    quoted = quote(filename)
    if quoted != filename:
        return f"{disposition}; filename*=utf-8''{quoted}"
    return f'{disposition}; filename="{filename}"'


async def close_stream(stream: Any):
    """Close a handler stream whatever its flavour (idempotent)"""
    aclose = getattr(stream, "aclose", None)
    if aclose is not None:
        await aclose()
        return
    close = getattr(stream, "close", None)
    if close is not None:
        await maybe_await(close())


async def iterate_stream(stream: Any) -> AsyncIterator[bytes]:
    """Yield bytes from an async iterable, a binary file object or a sync iterable"""
    if hasattr(stream, "__aiter__"):
        async for chunk in stream:
            yield chunk
    elif hasattr(stream, "read"):
        while True:
            chunk = await asyncio.to_thread(stream.read, STREAM_CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    else:
        async for chunk in iterate_in_threadpool(iter(stream)):
            yield chunk


class ManagedStreamingResponse(StreamingResponse):
    """StreamingResponse that closes its source on every exit path.

    Success, client disconnect, and errors while sending all end in the
    finally block below.
    """

    def __init__(self, stream: Any, **kwargs):
        self.source = stream
        super().__init__(iterate_stream(stream), **kwargs)

    async def __call__(self, scope, receive, send):
        try:
            await super().__call__(scope, receive, send)
        finally:
            await close_stream(self.source)


class ContentDeliveryNegotiator:
    """Wraps one content handler (file or RO-Crate) behind get/head.

    label names the content in 404 messages; content_type, when given,
    overrides the handler's content type for every response.
    """

    def __init__(self, handler, label: str = "file", content_type: Optional[str] = None):
        self.handler = handler
        self.label = label
        self.content_type = content_type

    async def retrieve_metadata(self, record, record_id: str, context) -> FileMetadata:
        """Metadata only: never opens streams or signs URLs"""
        metadata = await maybe_await(self.handler.head(record, context))
        if not metadata:
            raise NotFoundError(f"The requested {self.label} metadata was not found", record_id)
        return self._metadata(metadata)

    async def retrieve_content(self, record, record_id: str, context):
        result = await maybe_await(self.handler.get(record, context))
        if not result:
            raise NotFoundError(f"The requested {self.label} could not be retrieved", record_id)
        if not isinstance(result, (RedirectResult, StreamResult, FilePathResult)):
            raise TypeError(f"Unexpected {self.label} result type: {type(result).__name__}")
        return result

    def head_response(self, metadata: FileMetadata) -> Response:
        return Response(status_code=200, headers=metadata_headers(metadata))

    async def respond(self, result, no_redirect: bool = False,
                      disposition: Optional[str] = None) -> Response:
        """Convert a FileResult into a response.

        If building the response fails, a stream result is closed before
        the error propagates.
        """
        try:
            return await self._respond(result, no_redirect, disposition)
        except BaseException:
            if isinstance(result, StreamResult):
                await close_stream(result.stream)
            raise

    async def _respond(self, result, no_redirect: bool, disposition: Optional[str]) -> Response:
        if isinstance(result, RedirectResult):
            if no_redirect:
                return JSONResponse({"location": result.url}, status_code=200)
            return RedirectResponse(result.url, status_code=302)

        metadata = self._metadata(result.metadata)

        if isinstance(result, StreamResult):
            headers = metadata_headers(metadata)
            if disposition:
                headers["Content-Disposition"] = disposition
            return ManagedStreamingResponse(result.stream, status_code=200, headers=headers)

        if isinstance(result, FilePathResult):
            if result.accel_path:
                # Content-Length is left to the proxy, the body here is empty
                headers = metadata_headers(metadata, include_length=False)
                if disposition:
                    headers["Content-Disposition"] = disposition
                headers[ACCEL_REDIRECT_HEADER] = result.accel_path
                return Response(status_code=200, headers=headers)

            stat_result = await asyncio.to_thread(os.stat, result.path)
            # FileResponse derives Content-Length from the file itself
            headers = metadata_headers(metadata, include_length=False)
            if disposition:
                headers["Content-Disposition"] = disposition
            return FileResponse(
                result.path,
                status_code=200,
                headers=headers,
                media_type=metadata.content_type,
                stat_result=stat_result,
            )

        raise TypeError(f"Unexpected {self.label} result type: {type(result).__name__}")

    def _metadata(self, metadata: FileMetadata) -> FileMetadata:
        if self.content_type:
            return metadata.with_content_type(self.content_type)
        return metadata
