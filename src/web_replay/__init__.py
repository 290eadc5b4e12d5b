"""
Web Replay - Record web page interactions and replay them step by step.

A recording is a trace: an ordered list of navigate, click, type and key
press steps, where every click carries a ranked list of locators. Replay
walks the trace one step per command, resolving each click target against
the live page with a fixed fallback order.

Example:
    >>> from web_replay import RecordReplayMode
    >>> mode = RecordReplayMode()
    >>> await mode.start(page)
    >>> await mode.execute({"action": "record"})
"""

__version__ = "0.1.0"

# Public API exports
from web_replay.config.settings import Settings
from web_replay.modes.record_replay import RecordReplayMode
from web_replay.recorder.trace import Trace, load_trace, save_trace
from web_replay.replay.engine import ReplayEngine, ReplayState

__all__ = [
    "RecordReplayMode",
    "ReplayEngine",
    "ReplayState",
    "Settings",
    "Trace",
    "load_trace",
    "save_trace",
    "__version__",
]
