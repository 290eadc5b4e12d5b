"""
Replay engine exceptions.
"""

from web_replay.exceptions.base import WebReplayError


class ReplayError(WebReplayError):
    """Base exception for replay errors."""
    pass


class ReplayStateError(ReplayError):
    """
    Illegal replay state transition.
    
    Raised when e.g. starting a replay with nothing loaded, or advancing
    a replay that is not stepping.
    """
    
    def __init__(self, message: str, state: str | None = None):
        super().__init__(message, {"state": state})
        self.state = state
