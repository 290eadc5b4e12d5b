"""
Base Mode - Command-driven interface for driving a page.

A mode is started on a page, then receives dict commands through
``execute`` and answers each with a ModeResult; failures are reported in
the result rather than raised.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from web_replay.config.settings import Settings
    from web_replay.interfaces.browser import IPage


@dataclass
class ModeConfig:
    """Settings a mode builds its components from (None: the global settings)."""
    settings: Optional["Settings"] = None


@dataclass
class ModeResult:
    """
    Outcome of one mode command.

    Attributes:
        success: Whether the command completed
        steps_executed: Steps recorded, exported or replayed by the command
        data: Command-specific payload
        error: Failure message
    """
    success: bool
    steps_executed: int = 0
    data: Optional[Any] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str, data: Optional[Any] = None) -> "ModeResult":
        return cls(success=False, error=error, data=data)


class IInteractionMode(ABC):
    """Abstract interface for interaction modes."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    @abstractmethod
    async def start(self, page: "IPage", config: Optional[ModeConfig] = None, **kwargs: Any) -> None:
        """Attach the mode to a page."""
        ...

    @abstractmethod
    async def execute(self, input_data: Any) -> ModeResult:
        """Run one command, typically ``{"action": ..., ...}``."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Detach from the page and release its components."""
        ...
