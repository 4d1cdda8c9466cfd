"""Content handlers: where file bytes and RO-Crate documents come from.

The embedding application supplies one FileHandler and one RoCrateHandler.
The local-disk implementations here serve records whose metadata bag
carries a storagePath.
"""

from .interfaces import ContentHandler, FileHandler, RoCrateHandler
from .local import LocalFileHandler, LocalRoCrateHandler

__all__ = ['ContentHandler', 'FileHandler', 'RoCrateHandler', 'LocalFileHandler', 'LocalRoCrateHandler']
