"""Search engine access (OpenSearch)."""

from .client import SearchClientFactory

__all__ = ['SearchClientFactory']
