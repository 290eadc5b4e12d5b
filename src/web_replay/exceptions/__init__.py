"""
Exceptions module - Custom exception hierarchy.

This module defines all custom exceptions used throughout Web Replay,
providing clear error types for the failure scenarios that are surfaced
to callers rather than absorbed locally.
"""

from web_replay.exceptions.base import (
    WebReplayError,
    ConfigurationError,
)
from web_replay.exceptions.browser import (
    BrowserError,
    BrowserLaunchError,
    PageError,
    NavigationError,
    ElementNotFoundError,
)
from web_replay.exceptions.trace import (
    TraceError,
    InvalidTraceError,
    RecordingStateError,
)
from web_replay.exceptions.messaging import (
    MessagingError,
    ExecutorUnavailableError,
)
from web_replay.exceptions.replay import (
    ReplayError,
    ReplayStateError,
)

__all__ = [
    # Base exceptions
    "WebReplayError",
    "ConfigurationError",
    # Browser exceptions
    "BrowserError",
    "BrowserLaunchError",
    "PageError",
    "NavigationError",
    "ElementNotFoundError",
    # Trace exceptions
    "TraceError",
    "InvalidTraceError",
    "RecordingStateError",
    # Messaging exceptions
    "MessagingError",
    "ExecutorUnavailableError",
    # Replay exceptions
    "ReplayError",
    "ReplayStateError",
]
