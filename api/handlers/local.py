"""
Local-disk content handlers.

Records point at their content through meta["storagePath"], absolute or
relative to the storage root. With an accel prefix configured, files under
the root are offloaded to the reverse proxy (nginx X-Accel-Redirect)
instead of being streamed by the application.
"""
import asyncio
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from handlers.interfaces import FileHandler, RoCrateHandler
from value_objects import FileMetadata, FilePathResult, StreamResult

logger = logging.getLogger(__name__)

ROCRATE_CONTENT_TYPE = "application/ld+json"


class LocalStorage:
    """Maps records to paths under a storage root."""

    def __init__(self, root: Path, accel_prefix: Optional[str] = None):
        self.root = Path(root)
        self.accel_prefix = accel_prefix

    def path_for(self, record) -> Optional[Path]:
        storage_path = (record.meta or {}).get("storagePath")
        if not storage_path:
            return None
        path = Path(storage_path)
        if not path.is_absolute():
            path = self.root / path
        return path

    def accel_path_for(self, path: Path) -> Optional[str]:
        """Internal proxy location for path, or None when offload is off"""
        if not self.accel_prefix:
            return None
        try:
            relative = path.resolve().relative_to(self.root.resolve())
        except ValueError:
            logger.debug(f"{path} is outside {self.root}, serving without offload")
            return None
        return f"{self.accel_prefix.rstrip('/')}/{relative.as_posix()}"

    async def stat(self, record) -> Optional[os.stat_result]:
        """stat() the record's file; None when it has no path or is missing"""
        path = self.path_for(record)
        if path is None:
            return None
        try:
            return await asyncio.to_thread(os.stat, path)
        except FileNotFoundError:
            return None


def _modified(stat_result: os.stat_result) -> datetime:
    return datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc)


class LocalFileHandler(FileHandler):
    """Serves File records from local disk."""

    def __init__(self, root: Path, accel_prefix: Optional[str] = None):
        self.storage = LocalStorage(root, accel_prefix)

    async def head(self, record, context=None):
        stat_result = await self.storage.stat(record)
        if stat_result is None:
            return False
        return self._metadata(record, stat_result)

    async def get(self, record, context=None):
        stat_result = await self.storage.stat(record)
        if stat_result is None:
            return False
        path = self.storage.path_for(record)
        return FilePathResult(
            path=str(path),
            metadata=self._metadata(record, stat_result),
            accel_path=self.storage.accel_path_for(path),
        )

    @staticmethod
    def _metadata(record, stat_result: os.stat_result) -> FileMetadata:
        return FileMetadata(
            content_type=record.media_type,
            content_length=int(record.size),
            last_modified=_modified(stat_result),
        )


class LocalRoCrateHandler(RoCrateHandler):
    """Serves RO-Crate metadata documents of Entity records from local disk."""

    def __init__(self, root: Path, accel_prefix: Optional[str] = None):
        self.storage = LocalStorage(root, accel_prefix)

    async def head(self, record, context=None):
        stat_result = await self.storage.stat(record)
        if stat_result is None:
            return False
        return self._metadata(stat_result)

    async def get(self, record, context=None):
        stat_result = await self.storage.stat(record)
        if stat_result is None:
            return False
        path = self.storage.path_for(record)
        metadata = self._metadata(stat_result)

        accel_path = self.storage.accel_path_for(path)
        if accel_path:
            return FilePathResult(path=str(path), metadata=metadata, accel_path=accel_path)

        stream = await asyncio.to_thread(open, path, "rb")
        return StreamResult(stream=stream, metadata=metadata)

    @staticmethod
    def _metadata(stat_result: os.stat_result) -> FileMetadata:
        return FileMetadata(
            content_type=ROCRATE_CONTENT_TYPE,
            content_length=stat_result.st_size,
            last_modified=_modified(stat_result),
        )
