"""
Centralized logging configuration.

Lowers verbosity of third-party client libraries whose per-request logging
would otherwise flood the service logs. Import triggers that part;
configure_logging() installs the format and level at process start.
"""
import logging

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_SUPPRESSED_LOGGERS = [
    'opensearch',
    'urllib3',
    'asyncpg',
]

for _logger_name in _SUPPRESSED_LOGGERS:
    logging.getLogger(_logger_name).setLevel(logging.WARNING)


def configure_logging(level: str = "INFO"):
    """Install the service log format at the given level"""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
