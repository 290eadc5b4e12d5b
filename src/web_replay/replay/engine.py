"""
Replay Engine - Manual single-step replay of a trace.

States::

    IDLE --load--> LOADED --start--> STEPPING --step--> STEPPING
                                         |                  |
                                         +--last step--> COMPLETED --> IDLE
    any state --stop--> IDLE

The engine never advances on its own: every ``step()`` call replays exactly
one step. A step that cannot find its target aborts the replay (back to
IDLE); there is no automatic retry and no skipping ahead.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, TYPE_CHECKING

from web_replay.exceptions import ReplayStateError
from web_replay.messaging.protocol import ReplayClick, ReplayKeyPress, ReplayType, Response
from web_replay.recorder.steps import (
    ClickStep,
    NavigateStep,
    PressStep,
    Step,
    TypeStep,
    describe_step,
)

if TYPE_CHECKING:
    from web_replay.messaging.messenger import Messenger
    from web_replay.recorder.trace import Trace

logger = logging.getLogger(__name__)


class ReplayState(str, Enum):
    """Replay engine states."""
    IDLE = "idle"
    LOADED = "loaded"
    STEPPING = "stepping"
    COMPLETED = "completed"


@dataclass
class ReplayCursor:
    """
    Position in the step sequence being replayed.

    Owned by the engine; only an advance moves ``index``.
    """
    steps: Tuple[Step, ...]
    index: int = 0

    @property
    def total(self) -> int:
        return len(self.steps)

    @property
    def current(self) -> Optional[Step]:
        if self.index < len(self.steps):
            return self.steps[self.index]
        return None

    @property
    def is_exhausted(self) -> bool:
        return self.index >= len(self.steps)


@dataclass
class ReplayStepResult:
    """
    Outcome of one advance.

    Attributes:
        index: Index of the step replayed
        step: The step
        success: Whether the step's action was carried out
        error: Failure reason
        locator_type: Winning locator for click steps
        completed: True when this was the last step
    """
    index: int
    step: Step
    success: bool
    error: Optional[str] = None
    locator_type: Optional[str] = None
    completed: bool = False

    @property
    def description(self) -> str:
        return describe_step(self.step)


class _StepFailed(Exception):
    pass


class ReplayEngine:
    """
    Step-by-step trace replay against the messenger's page.

    Example:
        >>> engine = ReplayEngine(messenger)
        >>> engine.load(trace)
        >>> engine.start()
        >>> while engine.state == ReplayState.STEPPING:
        ...     result = await engine.step()
        ...     if not result.success:
        ...         break
    """

    def __init__(
        self,
        messenger: "Messenger",
        navigation_settle_ms: int = 3000,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the engine.

        Args:
            messenger: Channel to the page executor
            navigation_settle_ms: Fixed wait after every navigate step
            sleep: Sleep function (injectable for tests)
        """
        self._messenger = messenger
        self._settle_ms = navigation_settle_ms
        self._sleep = sleep

        self._state = ReplayState.IDLE
        self._loaded: Tuple[Step, ...] = ()
        self._cursor: Optional[ReplayCursor] = None
        self._task: Optional[asyncio.Task] = None

        self._on_step_started: List[Callable[[int, Step], None]] = []
        self._on_step_finished: List[Callable[[ReplayStepResult], None]] = []

    @property
    def state(self) -> ReplayState:
        return self._state

    @property
    def cursor(self) -> Optional[ReplayCursor]:
        return self._cursor

    @property
    def is_advancing(self) -> bool:
        return self._task is not None and not self._task.done()

    def on_step_started(self, callback: Callable[[int, Step], None]) -> None:
        """Register a callback run when a step is marked in progress."""
        self._on_step_started.append(callback)

    def on_step_finished(self, callback: Callable[[ReplayStepResult], None]) -> None:
        """Register a callback run with every step result."""
        self._on_step_finished.append(callback)

    def load(self, trace: "Trace") -> None:
        """
        Load a trace for replay.

        Raises:
            ReplayStateError: While a replay is in progress
        """
        self.load_steps(trace.steps)

    def load_steps(self, steps: Sequence[Step]) -> None:
        if self._state == ReplayState.STEPPING:
            raise ReplayStateError("Cannot load a trace while replaying", state=self._state.value)

        self._loaded = tuple(steps)
        self._cursor = ReplayCursor(steps=self._loaded)
        self._state = ReplayState.LOADED
        logger.info(f"Replay loaded with {len(self._loaded)} steps")

    def start(self) -> None:
        """
        Start replaying the loaded trace from its first step.

        Raises:
            ReplayStateError: If nothing is loaded, the trace is empty, or
                there is no page to replay against
        """
        if self._state != ReplayState.LOADED:
            raise ReplayStateError("No trace loaded", state=self._state.value)
        if not self._loaded:
            raise ReplayStateError("Trace has no steps", state=self._state.value)

        page = self._messenger.page
        if page is None or page.is_closed:
            raise ReplayStateError("No active page to replay on", state=self._state.value)

        self._cursor = ReplayCursor(steps=self._loaded)
        self._state = ReplayState.STEPPING
        logger.info("Replay started")

    async def step(self) -> ReplayStepResult:
        """
        Replay exactly one step.

        Returns:
            The step result; a failed result means the replay was aborted

        Raises:
            ReplayStateError: If not stepping, or a step is already running
        """
        if self._state != ReplayState.STEPPING or self._cursor is None:
            raise ReplayStateError("Replay is not running", state=self._state.value)
        if self.is_advancing:
            raise ReplayStateError("A step is already in progress", state=self._state.value)

        cursor = self._cursor
        index = cursor.index
        step = cursor.current
        self._task = asyncio.ensure_future(self._advance(cursor))
        try:
            return await self._task
        except asyncio.CancelledError:
            if self._task.cancelled() and self._cursor is not cursor:
                logger.info(f"Step {index + 1} abandoned: replay stopped")
                return ReplayStepResult(index=index, step=step, success=False, error="Replay stopped")
            raise
        finally:
            self._task = None

    def stop(self) -> None:
        """Stop replay from any state, discarding the cursor."""
        task = self._task
        self._cursor = None
        self._state = ReplayState.IDLE
        if task is not None and not task.done():
            task.cancel()
        logger.info("Replay stopped")

    async def _advance(self, cursor: ReplayCursor) -> ReplayStepResult:
        index = cursor.index
        step = cursor.steps[index]

        logger.info(f"Replaying step {index + 1}/{cursor.total}: {describe_step(step)}")
        self._notify_started(index, step)

        try:
            locator_type = await self._perform(step)
        except _StepFailed as e:
            return self._abort(cursor, ReplayStepResult(index=index, step=step, success=False, error=str(e)))

        if self._cursor is not cursor:
            return ReplayStepResult(index=index, step=step, success=False, error="Replay stopped")

        cursor.index += 1
        result = ReplayStepResult(
            index=index,
            step=step,
            success=True,
            locator_type=locator_type,
            completed=cursor.is_exhausted,
        )
        if result.completed:
            self._state = ReplayState.COMPLETED
            logger.info("Replay completed")

        # Observers of the last step see COMPLETED before teardown
        self._notify_finished(result)

        if result.completed:
            self._cursor = None
            self._state = ReplayState.IDLE
        return result

    async def _perform(self, step: Step) -> Optional[str]:
        """Carry out one step; returns the winning locator type for clicks."""
        if isinstance(step, NavigateStep):
            await self._navigate(step)
            return None
        if isinstance(step, ClickStep):
            return await self._click(step)
        if isinstance(step, TypeStep):
            self._check(await self._messenger.send(ReplayType(text=step.text)), "Typing failed")
            return None
        if isinstance(step, PressStep):
            self._check(await self._messenger.send(ReplayKeyPress(key=step.key)), "Key press failed")
            return None
        raise TypeError(f"Unsupported step: {step!r}")

    async def _navigate(self, step: NavigateStep) -> None:
        page = self._messenger.page
        if page is None:
            raise _StepFailed("No page to navigate")
        try:
            await page.goto(step.url)
        except Exception as e:
            raise _StepFailed(f"Navigation to {step.url} failed: {e}") from e
        await self._sleep(self._settle_ms / 1000)

    async def _click(self, step: ClickStep) -> Optional[str]:
        resolved = await self._messenger.resolve_locator(step.target.locators)
        if resolved.selector is None:
            raise _StepFailed("Could not resolve element")

        self._check(await self._messenger.send(ReplayClick(selector=resolved.selector)), "Click failed")
        return resolved.locator_type

    @staticmethod
    def _check(response: Optional[Response], message: str) -> None:
        if response is None:
            raise _StepFailed(f"{message}: page executor unreachable")
        if not response.success:
            raise _StepFailed(f"{message}: {response.error}" if response.error else message)

    def _abort(self, cursor: ReplayCursor, result: ReplayStepResult) -> ReplayStepResult:
        logger.warning(f"Step {result.index + 1} failed, aborting replay: {result.error}")
        self._notify_finished(result)
        if self._cursor is cursor:
            self._cursor = None
            self._state = ReplayState.IDLE
        return result

    def _notify_started(self, index: int, step: Step) -> None:
        for callback in self._on_step_started:
            try:
                callback(index, step)
            except Exception as e:
                logger.warning(f"Step-started callback error: {e}")

    def _notify_finished(self, result: ReplayStepResult) -> None:
        for callback in self._on_step_finished:
            try:
                callback(result)
            except Exception as e:
                logger.warning(f"Step-finished callback error: {e}")
