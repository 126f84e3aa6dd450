"""Utility modules for Hunt Radar."""

from .logging_config import get_logger, setup_logging
from .cache import ResponseCache
from .async_http import AsyncHTTPClient, DEFAULT_TIMEOUT

__all__ = [
    "get_logger",
    "setup_logging",
    "ResponseCache",
    "AsyncHTTPClient",
    "DEFAULT_TIMEOUT",
]
