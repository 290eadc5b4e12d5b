"""
Record & Replay Mode - The orchestrator.

Owns the trace store and the replay engine, and talks to the page only
through the messenger. Commands are plain dicts:

1. ``record`` / ``stop`` - capture a trace from the live page
2. ``status`` - recording and replay state
3. ``export`` - write the trace file
4. ``load`` - read a trace file (or dict) for replay
5. ``replay`` / ``step`` / ``replay_stop`` - manual single-step replay
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, TYPE_CHECKING

from web_replay.config import get_settings
from web_replay.exceptions import InvalidTraceError, RecordingStateError, ReplayStateError
from web_replay.executor.human_typing import HumanTyper
from web_replay.executor.registry import ExecutorRegistry
from web_replay.locators.generator import LocatorGenerator
from web_replay.locators.resolver import LocatorResolver
from web_replay.messaging.messenger import Messenger
from web_replay.messaging.protocol import (
    LocatorResolved,
    RecordStep,
    RecordingStarted,
    RecordingStopped,
    StartRecording,
    StopRecording,
)
from web_replay.modes.base import IInteractionMode, ModeConfig, ModeResult
from web_replay.recorder.heuristics import build_heuristics
from web_replay.recorder.recorder import StepRecorder
from web_replay.recorder.steps import describe_step
from web_replay.recorder.store import TraceStore
from web_replay.recorder.trace import Trace, load_trace, save_trace
from web_replay.replay.engine import ReplayEngine, ReplayState

if TYPE_CHECKING:
    from web_replay.config.settings import Settings
    from web_replay.interfaces.browser import IPage
    from web_replay.messaging.protocol import Push

logger = logging.getLogger(__name__)

ACTIONS = ("record", "stop", "status", "export", "load", "replay", "step", "replay_stop")


class RecordReplayMode(IInteractionMode):
    """
    Record & Replay interaction mode.

    Usage:
        >>> mode = RecordReplayMode()
        >>> await mode.start(page)
        >>>
        >>> # Record
        >>> await mode.execute({"action": "record"})
        >>> # User performs actions in the page...
        >>> result = await mode.execute({"action": "stop"})
        >>> await mode.execute({"action": "export", "output_path": "traces/"})
        >>>
        >>> # Replay, one step per command
        >>> await mode.execute({"action": "load", "path": "trace.json"})
        >>> await mode.execute({"action": "replay"})
        >>> result = await mode.execute({"action": "step"})
    """

    @property
    def name(self) -> str:
        return "Record & Replay"

    @property
    def description(self) -> str:
        return "Record page interactions as a trace and replay it step by step"

    def __init__(self, sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        """
        Initialize the mode.

        Args:
            sleep: Sleep function used for settle delays (injectable for tests)
        """
        self._sleep = sleep
        self._page: Optional["IPage"] = None
        self._is_running = False
        self.store = TraceStore()
        self.recorder: Optional[StepRecorder] = None
        self.registry: Optional[ExecutorRegistry] = None
        self.messenger: Optional[Messenger] = None
        self.engine: Optional[ReplayEngine] = None

    @property
    def page(self) -> Optional["IPage"]:
        return self._page

    async def start(
        self,
        page: "IPage",
        config: Optional[ModeConfig] = None,
        **kwargs: Any,
    ) -> None:
        """
        Wire up capture and replay components for a page.

        Args:
            page: Page to record on and replay against
            config: Mode configuration (settings default to the global ones)
        """
        settings: "Settings" = (config.settings if config and config.settings else get_settings())

        generator = LocatorGenerator(
            max_text_length=settings.capture.max_text_locator_length,
            xpath_max_depth=settings.capture.xpath_max_depth,
            max_css_classes=settings.capture.max_css_classes,
            semantic_kinds=settings.capture.semantic_locators,
        )
        self.recorder = StepRecorder(
            generator,
            heuristics=build_heuristics(
                settings.capture.navigation_heuristics,
                settings.capture.chat_hosts,
            ),
            special_keys=settings.capture.special_keys,
            debounce_ms=settings.capture.typing_debounce_ms,
        )
        self.registry = ExecutorRegistry(
            self.recorder,
            push=self._on_push,
            resolver=LocatorResolver(),
            typer=HumanTyper.from_settings(settings.replay, sleep=self._sleep),
        )
        self.messenger = Messenger(
            self.registry,
            page,
            retry_delay_ms=settings.messaging.retry_delay_ms,
            resolve_timeout_ms=settings.messaging.resolve_timeout_ms,
        )
        self.engine = ReplayEngine(
            self.messenger,
            navigation_settle_ms=settings.replay.navigation_settle_ms,
            sleep=self._sleep,
        )

        self._page = page
        self._is_running = True
        logger.info("Record & Replay mode started")

    async def execute(self, input_data: Any) -> ModeResult:
        """
        Execute a record/replay command.

        Args:
            input_data: Command dict with:
                - action: one of record, stop, status, export, load,
                  replay, step, replay_stop
                - output_path: File or directory (for 'export')
                - path: Trace file (for 'load')
                - trace: Trace document dict (for 'load', instead of path)

        Returns:
            Execution result
        """
        if not self._is_running:
            return ModeResult.failure("Mode not started. Call start() first.")

        if not isinstance(input_data, dict):
            return ModeResult.failure("Input must be a dict with 'action' key.")

        action = str(input_data.get("action", "")).lower()

        if action == "record":
            return await self._start_recording()

        elif action == "stop":
            return await self._stop_recording()

        elif action == "status":
            return self._get_status()

        elif action == "export":
            return self._export_trace(output_path=input_data.get("output_path"))

        elif action == "load":
            return self._load_trace(
                path=input_data.get("path"),
                trace=input_data.get("trace"),
            )

        elif action == "replay":
            return self._start_replay()

        elif action == "step":
            return await self._replay_step()

        elif action == "replay_stop":
            self.engine.stop()
            return ModeResult(success=True, data={"status": self.engine.state.value})

        else:
            return ModeResult.failure(f"Unknown action: {action}. Valid actions: {', '.join(ACTIONS)}")

    async def _start_recording(self) -> ModeResult:
        """Start capturing on the page."""
        try:
            self.store.begin()
        except RecordingStateError as e:
            return ModeResult.failure(str(e))

        response = await self.messenger.send(StartRecording())
        if response is None or not response.success:
            self.store.finish([])
            error = response.error if response and response.error else "Could not reach the page"
            logger.error(f"Failed to start recording: {error}")
            return ModeResult.failure(error)

        return ModeResult(
            success=True,
            data={
                "status": "recording",
                "message": "Recording started. Interact with the page, then call with action='stop'.",
            },
        )

    async def _stop_recording(self) -> ModeResult:
        """Stop capturing and freeze the trace."""
        if not self.store.is_recording:
            return ModeResult.failure("Not currently recording")

        response = await self.messenger.send(StopRecording())
        if self.store.is_recording:
            # No RECORDING_STOPPED arrived; keep the steps pushed so far
            logger.warning("Recording stopped without the final step list")
            self.store.finish()

        steps = self.store.steps
        return ModeResult(
            success=response is not None and response.success,
            steps_executed=len(steps),
            data={
                "status": "stopped",
                "step_count": len(steps),
                "trace": self.store.to_trace().to_dict(),
            },
            error=None if response is not None and response.success else "Page did not confirm stop",
        )

    def _get_status(self) -> ModeResult:
        """Get current recording and replay status."""
        cursor = self.engine.cursor
        return ModeResult(
            success=True,
            data={
                "status": "recording" if self.store.is_recording else self.engine.state.value,
                "step_count": len(self.store),
                "replay_state": self.engine.state.value,
                "replay_index": cursor.index if cursor else None,
                "replay_total": cursor.total if cursor else None,
            },
        )

    def _export_trace(self, output_path: Optional[str] = None) -> ModeResult:
        """Export the current trace."""
        if self.store.is_recording:
            return ModeResult.failure("Stop recording before exporting")
        if not len(self.store):
            return ModeResult.failure("No trace available. Record something first.")

        trace = self.store.to_trace()
        saved_to = None
        try:
            if output_path:
                saved_to = str(save_trace(trace, Path(output_path)))
        except OSError as e:
            logger.error(f"Export failed: {e}")
            return ModeResult.failure(str(e))

        return ModeResult(
            success=True,
            steps_executed=len(trace.steps),
            data={
                "content": trace.to_json(),
                "saved_to": saved_to,
            },
        )

    def _load_trace(self, path: Optional[str] = None, trace: Optional[dict] = None) -> ModeResult:
        """Load a trace for replay."""
        try:
            if path:
                loaded = load_trace(path)
            elif trace is not None:
                loaded = Trace.from_dict(trace)
            else:
                return ModeResult.failure("Provide 'path' or 'trace'")

            if self.store.is_recording:
                raise RecordingStateError("Cannot load a trace while recording")
            self.engine.load(loaded)
            self.store.load(loaded)
        except (InvalidTraceError, RecordingStateError, ReplayStateError) as e:
            logger.error(f"Failed to load trace: {e}")
            return ModeResult.failure(str(e))

        return ModeResult(
            success=True,
            data={
                "status": self.engine.state.value,
                "step_count": len(loaded.steps),
                "steps": [describe_step(step) for step in loaded.steps],
            },
        )

    def _start_replay(self) -> ModeResult:
        """Start a replay of the loaded (or last recorded) trace."""
        try:
            if self.engine.state != ReplayState.LOADED and len(self.store) and not self.store.is_recording:
                self.engine.load(self.store.to_trace())
            self.engine.start()
        except ReplayStateError as e:
            return ModeResult.failure(str(e))

        return ModeResult(
            success=True,
            data={"status": self.engine.state.value, "step_count": self.engine.cursor.total},
        )

    async def _replay_step(self) -> ModeResult:
        """Replay the next step."""
        try:
            result = await self.engine.step()
        except ReplayStateError as e:
            return ModeResult.failure(str(e))

        return ModeResult(
            success=result.success,
            steps_executed=1 if result.success else 0,
            data={
                "index": result.index,
                "description": result.description,
                "locator_type": result.locator_type,
                "completed": result.completed,
                "status": self.engine.state.value,
            },
            error=result.error,
        )

    def _on_push(self, push: "Push") -> None:
        """Receive a push from a page executor."""
        if isinstance(push, LocatorResolved):
            self.messenger.on_locator_resolved(push)
        elif isinstance(push, RecordStep):
            if self.store.is_recording:
                self.store.append(push.step)
            else:
                logger.debug(f"Ignoring {push.step.type} step pushed outside a recording")
        elif isinstance(push, RecordingStarted):
            self.store.mark_started(push.start_time)
            logger.info("Recording started")
        elif isinstance(push, RecordingStopped):
            self.store.finish(push.steps)
            logger.info(f"Recording stopped with {len(push.steps)} steps")
        else:
            logger.warning(f"Unhandled push: {push!r}")

    async def stop(self) -> None:
        """Stop the mode and cleanup."""
        if self.store.is_recording:
            await self._stop_recording()
        if self.engine is not None:
            self.engine.stop()

        self._is_running = False
        self._page = None
        logger.info("Record & Replay mode stopped")
