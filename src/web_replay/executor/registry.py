"""
Executor Registry - One page executor per page load.

``ensure(page)`` is the injection point: it returns the executor for the
page's current load, creating and initializing one if the page has loaded
a new document since the last call. Calling it repeatedly for the same
load is a no-op.
"""

import asyncio
import logging
from typing import Callable, Dict, Optional, Set, TYPE_CHECKING

from web_replay.executor.executor import PageExecutor
from web_replay.executor.human_typing import HumanTyper
from web_replay.locators.resolver import LocatorResolver
from web_replay.messaging.protocol import RecordStep
from web_replay.recorder.recorder import StepRecorder

if TYPE_CHECKING:
    from web_replay.interfaces.browser import IPage
    from web_replay.messaging.protocol import Push

logger = logging.getLogger(__name__)


class ExecutorRegistry:
    """
    Creates and tracks page executors.

    The registry owns the capture session (``StepRecorder``). Every new
    executor is handed the same recorder, so a recording that is running
    when the page loads a new document simply continues; per-load state
    (the active guard, element references) starts fresh.

    Example:
        >>> registry = ExecutorRegistry(recorder, push=orchestrator.receive)
        >>> executor = await registry.ensure(page)
        >>> await registry.ensure(page) is executor
        True
    """

    def __init__(
        self,
        recorder: StepRecorder,
        push: Callable[["Push"], None],
        resolver: Optional[LocatorResolver] = None,
        typer: Optional[HumanTyper] = None,
    ):
        self.recorder = recorder
        self._push = push
        self._resolver = resolver or LocatorResolver()
        self._typer = typer or HumanTyper()
        self._executors: Dict[int, PageExecutor] = {}
        self._watched: Set[int] = set()
        self._tasks: Set[asyncio.Task] = set()

        recorder.on_step(self._push_step)

    def current(self, page: "IPage") -> Optional[PageExecutor]:
        """The executor for the page's current load, if one was injected."""
        executor = self._executors.get(id(page))
        if executor is None or executor.is_stale:
            return None
        return executor

    async def ensure(self, page: "IPage") -> PageExecutor:
        """
        Make sure the page's current load has an active executor.

        Returns:
            The (possibly pre-existing) executor
        """
        executor = self.current(page)
        if executor is not None:
            await executor.initialize()
            return executor

        executor = PageExecutor(
            page,
            self.recorder,
            push=self._push,
            resolver=self._resolver,
            typer=self._typer,
        )
        self._executors[id(page)] = executor
        await executor.initialize()
        logger.info(f"Injected executor into page load {executor.load_id}")

        if id(page) not in self._watched:
            self._watched.add(id(page))
            page.on_new_document(lambda: self._on_new_document(page))
        return executor

    def forget(self, page: "IPage") -> None:
        self._executors.pop(id(page), None)

    def _on_new_document(self, page: "IPage") -> None:
        # Keep capturing across full page loads while recording
        if not self.recorder.is_recording or page.is_closed:
            return
        task = asyncio.ensure_future(self.ensure(page))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _push_step(self, step) -> None:
        try:
            self._push(RecordStep(step=step))
        except Exception as e:
            logger.warning(f"Failed to push step: {e}")
