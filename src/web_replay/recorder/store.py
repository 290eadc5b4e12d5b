"""
Trace Store - The orchestrator's copy of the trace being built or replayed.
"""

from typing import List, Optional, Sequence
import logging

from web_replay.exceptions import RecordingStateError
from web_replay.recorder.steps import Step
from web_replay.recorder.trace import TRACE_VERSION, Trace

logger = logging.getLogger(__name__)


class TraceStore:
    """
    Ordered, append-only step log.

    The log is created empty when a recording starts, grows only while the
    recording is active, and is frozen when it stops. At stop the executor's
    step list is authoritative and replaces whatever was pushed so far.

    Example:
        >>> store = TraceStore()
        >>> store.begin(start_time=1700000000000)
        >>> store.append(step)
        >>> store.finish(final_steps)
        >>> trace = store.to_trace()
    """

    def __init__(self):
        self._steps: List[Step] = []
        self._recording = False
        self._start_time: Optional[int] = None

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def start_time(self) -> Optional[int]:
        """Recording start, epoch milliseconds."""
        return self._start_time

    @property
    def steps(self) -> tuple:
        return tuple(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def begin(self, start_time: Optional[int] = None) -> None:
        """
        Start a new recording, discarding any previous steps.

        Raises:
            RecordingStateError: If a recording is already active
        """
        if self._recording:
            raise RecordingStateError("Recording already in progress")
        self._steps = []
        self._start_time = start_time
        self._recording = True
        logger.debug("Trace store recording")

    def mark_started(self, start_time: int) -> None:
        """Record the start time reported by the executor."""
        self._start_time = start_time

    def append(self, step: Step) -> None:
        """
        Append one captured step.

        Raises:
            RecordingStateError: If no recording is active
        """
        if not self._recording:
            raise RecordingStateError("Cannot add steps when not recording")
        self._steps.append(step)

    def finish(self, steps: Optional[Sequence[Step]] = None) -> None:
        """
        Freeze the log.

        Args:
            steps: Authoritative step list from the executor, adopted as-is
        """
        if steps is not None:
            self._steps = list(steps)
        self._recording = False
        logger.debug(f"Trace store frozen with {len(self._steps)} steps")

    def load(self, trace: Trace) -> None:
        """
        Replace the log with a loaded trace.

        Raises:
            RecordingStateError: If a recording is active
        """
        if self._recording:
            raise RecordingStateError("Cannot load a trace while recording")
        self._steps = list(trace.steps)
        self._start_time = None

    def clear(self) -> None:
        if self._recording:
            raise RecordingStateError("Cannot clear while recording")
        self._steps = []
        self._start_time = None

    def to_trace(self) -> Trace:
        return Trace(version=TRACE_VERSION, steps=list(self._steps))
