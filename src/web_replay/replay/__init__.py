"""
Replay Module - Manual, step-by-step trace replay.
"""

from web_replay.replay.engine import ReplayEngine, ReplayCursor, ReplayState, ReplayStepResult

__all__ = [
    "ReplayEngine",
    "ReplayCursor",
    "ReplayState",
    "ReplayStepResult",
]
