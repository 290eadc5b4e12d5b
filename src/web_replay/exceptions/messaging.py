"""
Cross-context messaging exceptions.
"""

from web_replay.exceptions.base import WebReplayError


class MessagingError(WebReplayError):
    """Base exception for messaging errors."""
    pass


class ExecutorUnavailableError(MessagingError):
    """
    The page-side executor cannot be reached.
    
    Raised when a message is delivered to an executor whose page load
    has ended (the page navigated or closed) or that was never injected.
    """
    
    def __init__(self, message: str, load_id: int | None = None):
        super().__init__(message, {"load_id": load_id})
        self.load_id = load_id
