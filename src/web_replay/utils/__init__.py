"""
Utilities module - Common utility functions.
"""

from web_replay.utils.logging import configure_logging, setup_logging, JsonLineFormatter
from web_replay.utils.retry import retry_async, with_timeout, RetryConfig

__all__ = [
    "configure_logging",
    "setup_logging",
    "JsonLineFormatter",
    "retry_async",
    "with_timeout",
    "RetryConfig",
]
