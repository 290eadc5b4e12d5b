"""
Modes Module - Orchestrating interaction modes.
"""

from web_replay.modes.base import IInteractionMode, ModeConfig, ModeResult
from web_replay.modes.record_replay import RecordReplayMode

__all__ = [
    "IInteractionMode",
    "ModeConfig",
    "ModeResult",
    "RecordReplayMode",
]
