"""
Environment configuration loader.

Logic for reading environment variables lives with the data source
(environment) rather than in the Config dataclasses.
"""
import os
from pathlib import Path
from typing import Optional, Tuple

from config import (
    Config, DatabaseConfig, SearchConfig, ServerConfig, StorageConfig,
    DEFAULT_FACET_FIELDS
)

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


class EnvironmentConfigLoader:
    """Loads configuration from environment variables.

    Single Responsibility: Environment access logic.
    """

    def __init__(self, environ=None):
        self.environ = os.environ if environ is None else environ

    def load(self) -> Config:
        """Create Config from environment variables"""
        return Config(
            database=self._load_database_config(),
            search=self._load_search_config(),
            server=self._load_server_config(),
            storage=self._load_storage_config()
        )

    def _load_database_config(self) -> DatabaseConfig:
        """Load database configuration from environment"""
        return DatabaseConfig.from_url(
            self._get_optional("DATABASE_URL", DatabaseConfig.database_url),
            pool_min_size=self._get_int("DB_POOL_MIN_SIZE", 1),
            pool_max_size=self._get_int("DB_POOL_MAX_SIZE", 10),
            create_schema=self._get_bool("DB_CREATE_SCHEMA", False)
        )

    def _load_search_config(self) -> SearchConfig:
        """Load OpenSearch configuration from environment"""
        return SearchConfig(
            url=self._get_optional("OPENSEARCH_URL", SearchConfig.url),
            index=self._get_optional("OPENSEARCH_INDEX", SearchConfig.index),
            verify_certs=self._get_bool("OPENSEARCH_VERIFY_CERTS", True),
            facet_fields=self._get_list("SEARCH_FACET_FIELDS", DEFAULT_FACET_FIELDS),
            facet_size=self._get_int("SEARCH_FACET_SIZE", 20)
        )

    def _load_server_config(self) -> ServerConfig:
        """Load HTTP server configuration from environment"""
        return ServerConfig(
            host=self._get_optional("HOST", ServerConfig.host),
            port=self._get_int("PORT", 8000),
            cors_enabled=self._get_bool("CORS_ENABLED", True),
            expose_error_details=self._get_bool("EXPOSE_ERROR_DETAILS", False),
            log_level=self._get_optional("LOG_LEVEL", "INFO").upper()
        )

    def _load_storage_config(self) -> StorageConfig:
        """Load local storage configuration from environment"""
        return StorageConfig(
            root=Path(self._get_optional("STORAGE_ROOT", "/data")),
            accel_prefix=self.environ.get("ACCEL_PREFIX") or None
        )

    def _get_optional(self, key: str, default: str) -> str:
        """Get optional string environment variable"""
        return self.environ.get(key, default)

    def _get_bool(self, key: str, default: bool) -> bool:
        """Get boolean environment variable"""
        value = self.environ.get(key)
        if value is None or value == "":
            return default
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"{key} must be a boolean, got {value!r}")

    def _get_int(self, key: str, default: int) -> int:
        """Get integer environment variable"""
        value = self.environ.get(key, str(default))
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{key} must be an integer, got {value!r}") from None

    def _get_list(self, key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
        """Get comma-separated list environment variable"""
        value: Optional[str] = self.environ.get(key)
        if not value:
            return tuple(default)
        return tuple(item.strip() for item in value.split(",") if item.strip())
