"""
Trace and recording exceptions.
"""

from web_replay.exceptions.base import WebReplayError


class TraceError(WebReplayError):
    """Base exception for trace handling errors."""
    pass


class InvalidTraceError(TraceError):
    """
    A trace document is malformed.
    
    Raised when a trace file is missing ``version`` or ``steps``, or when
    any step does not match a known step type. No steps are adopted from
    an invalid trace.
    """
    
    def __init__(self, message: str, errors: list | None = None, source: str | None = None):
        super().__init__(message, {"source": source} if source else None)
        self.errors = errors or []
        self.source = source


class RecordingStateError(TraceError):
    """
    Operation not allowed in the current recording state.
    
    Raised when appending to a trace that is not being recorded,
    or starting a recording that is already running.
    """
    pass
