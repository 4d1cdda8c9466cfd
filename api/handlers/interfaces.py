"""Content handler interfaces.

Contract:
    - get() returns one FileResult variant, or False when the content is
      not available (maps to 404). Raising means infrastructure failure
      (maps to 500).
    - head() returns FileMetadata or False. It must not open streams or
      generate signed URLs; HEAD requests only ever call head().
    - Either method may be a coroutine.
"""
from abc import ABC, abstractmethod
from typing import Literal, Union

from domain_models import EntityRecord, FileRecord
from value_objects import FileMetadata, FileResult, RequestContext


class ContentHandler(ABC):
    """Common get/head contract for file and RO-Crate content."""

    @abstractmethod
    def get(self, record, context: RequestContext) -> Union[FileResult, Literal[False]]:
        pass

    @abstractmethod
    def head(self, record, context: RequestContext) -> Union[FileMetadata, Literal[False]]:
        pass


class FileHandler(ContentHandler):
    """Serves the binary content of File records."""

    @abstractmethod
    def get(self, record: FileRecord, context: RequestContext) -> Union[FileResult, Literal[False]]:
        pass

    @abstractmethod
    def head(self, record: FileRecord, context: RequestContext) -> Union[FileMetadata, Literal[False]]:
        pass


class RoCrateHandler(ContentHandler):
    """Serves the RO-Crate metadata document of Entity records."""

    @abstractmethod
    def get(self, record: EntityRecord, context: RequestContext) -> Union[FileResult, Literal[False]]:
        pass

    @abstractmethod
    def head(self, record: EntityRecord, context: RequestContext) -> Union[FileMetadata, Literal[False]]:
        pass
