"""
Step Recorder - Turns raw page events into Step records.

Clicks become steps immediately. Typed input is debounced: every input
event restarts an idle timer and a ``type`` step is only emitted when the
timer fires. Special keys become ``press`` steps, Enter first flushing any
pending input so the text is recorded before the key. URL changes become
``navigate`` steps unless a navigation heuristic vetoes them.
"""

import asyncio
import logging
import time
from typing import Callable, List, Optional, Sequence

from web_replay.interfaces.browser import CaptureSink, ElementSnapshot
from web_replay.locators.generator import LocatorGenerator
from web_replay.recorder.heuristics import NavigationContext, NavigationHeuristic
from web_replay.recorder.steps import (
    ClickStep,
    ClickTarget,
    NavigateStep,
    PressStep,
    Step,
    TypeStep,
)

logger = logging.getLogger(__name__)

DEFAULT_SPECIAL_KEYS = (
    "Enter", "Tab", "Escape", "ArrowUp", "ArrowDown", "ArrowLeft", "ArrowRight",
)


class StepRecorder(CaptureSink):
    """
    Capture engine for one recording session.

    The recorder is not tied to a page load: when a new document loads
    mid-recording the new page executor keeps feeding the same recorder,
    so a recording can span full navigations.

    Example:
        >>> recorder = StepRecorder(LocatorGenerator())
        >>> recorder.on_step(lambda step: print(step))
        >>> recorder.start("https://example.com")
        >>> recorder.on_click(snapshot)
        >>> steps = recorder.stop()
    """

    def __init__(
        self,
        generator: LocatorGenerator,
        heuristics: Optional[Sequence[NavigationHeuristic]] = None,
        special_keys: Sequence[str] = DEFAULT_SPECIAL_KEYS,
        debounce_ms: int = 1000,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the recorder.

        Args:
            generator: Locator generator for click targets
            heuristics: Navigation heuristics, consulted in order
            special_keys: Keys recorded as press steps
            debounce_ms: Typing idle period before a type step is emitted
            clock: Monotonic clock in seconds, used for step timestamps
            wall_clock: Epoch clock in seconds, used for the reported start time
        """
        self._generator = generator
        self._heuristics = list(heuristics or [])
        self._special_keys = set(special_keys)
        self._debounce_ms = debounce_ms
        self._clock = clock
        self._wall_clock = wall_clock

        self._is_recording = False
        self._steps: List[Step] = []
        self._start: float = 0.0
        self._start_time: int = 0
        self._last_t = 0
        self._last_typed_text = ""
        self._last_url: Optional[str] = None
        self._last_step_type: Optional[str] = None
        self._pending_text: Optional[str] = None
        self._typing_timer: Optional[asyncio.TimerHandle] = None

        self._on_step_callbacks: List[Callable[[Step], None]] = []

    @property
    def is_recording(self) -> bool:
        return self._is_recording

    @property
    def steps(self) -> List[Step]:
        """Steps captured so far."""
        return list(self._steps)

    @property
    def start_time(self) -> int:
        """Recording start, epoch milliseconds."""
        return self._start_time

    @property
    def last_url(self) -> Optional[str]:
        return self._last_url

    @property
    def has_pending_input(self) -> bool:
        return self._typing_timer is not None

    def on_step(self, callback: Callable[[Step], None]) -> None:
        """Register a callback for every emitted step."""
        self._on_step_callbacks.append(callback)

    def start(self, url: str) -> None:
        """
        Start recording, resetting all session state.

        The first step is always a navigate step to ``url`` at ``t = 0``.
        """
        self._cancel_typing_timer()
        self._is_recording = True
        self._steps = []
        self._start = self._clock()
        self._start_time = int(self._wall_clock() * 1000)
        self._last_t = 0
        self._last_typed_text = ""
        self._last_url = url
        self._last_step_type = None

        logger.info(f"Recording started at {url}")
        self._emit(NavigateStep(t=0, url=url))

    def stop(self) -> List[Step]:
        """
        Stop recording. Pending debounced input is discarded.

        Returns:
            The authoritative list of captured steps
        """
        self._cancel_typing_timer()
        self._is_recording = False
        logger.info(f"Recording stopped: {len(self._steps)} steps")
        return list(self._steps)

    def on_click(self, target: ElementSnapshot) -> None:
        if not self._is_recording:
            return
        locators = self._generator.generate(target)
        self._emit(ClickStep(t=self._elapsed_ms(), target=ClickTarget(locators=locators)))

    def on_input(self, text: str, editable: bool) -> None:
        if not self._is_recording or not editable:
            return

        self._cancel_typing_timer()
        self._pending_text = text
        loop = asyncio.get_running_loop()
        self._typing_timer = loop.call_later(self._debounce_ms / 1000, self._on_typing_idle)

    def on_keydown(self, key: str, text: Optional[str], editable: bool) -> None:
        if not self._is_recording or key not in self._special_keys:
            return

        if key == "Enter" and self._typing_timer is not None:
            self._cancel_typing_timer()
            if editable:
                self._record_typed(text)

        self._emit(PressStep(t=self._elapsed_ms(), key=key))

    def on_url_change(self, url: str) -> None:
        if not self._is_recording or url == self._last_url:
            return

        context = NavigationContext(
            url=url,
            last_url=self._last_url,
            last_step_type=self._last_step_type,
        )
        for heuristic in self._heuristics:
            if heuristic.suppresses(context):
                logger.debug(f"Navigation to {url} suppressed by {heuristic.name}")
                self._last_url = url
                return

        self._emit(NavigateStep(t=self._elapsed_ms(), url=url))
        self._last_url = url

    def _on_typing_idle(self) -> None:
        self._typing_timer = None
        text, self._pending_text = self._pending_text, None
        if self._is_recording:
            self._record_typed(text)

    def _record_typed(self, text: Optional[str]) -> None:
        if text and text != self._last_typed_text:
            self._last_typed_text = text
            self._emit(TypeStep(t=self._elapsed_ms(), text=text))

    def _cancel_typing_timer(self) -> None:
        if self._typing_timer is not None:
            self._typing_timer.cancel()
            self._typing_timer = None
        self._pending_text = None

    def _emit(self, step: Step) -> None:
        self._steps.append(step)
        self._last_step_type = step.type
        logger.debug(f"Recorded: {step.type} at {step.t}ms")

        for callback in self._on_step_callbacks:
            try:
                callback(step)
            except Exception as e:
                logger.warning(f"Step callback error: {e}")

    def _elapsed_ms(self) -> int:
        """Milliseconds since recording started, never going backwards."""
        elapsed = int((self._clock() - self._start) * 1000)
        self._last_t = max(self._last_t, elapsed)
        return self._last_t
