"""File listing: store page + count, then the file pipeline."""
from typing import Any, Dict

from domain_models import FileFilter


class FileLister:
    """Lists files for GET /files"""

    def __init__(self, file_repository, pipeline):
        self.files = file_repository
        self.pipeline = pipeline

    async def list(self, filter: FileFilter, sort: str, order: str,
                   limit: int, offset: int, context) -> Dict[str, Any]:
        records = await self.files.find_many(filter, sort=sort, order=order, limit=limit, offset=offset)
        total = await self.files.count(filter)
        files = await self.pipeline.run_many(records, context)
        return {
            'total': total,
            'files': files,
        }
