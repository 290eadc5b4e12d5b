"""
Page Executor - The page-side half of the record/replay system.

One executor exists per page load. It receives raw page events and feeds
them to the recorder, and it carries out orchestrator requests (resolve a
locator, click, type, press a key) against the page. Pushes back to the
orchestrator go through a ``push`` callback.
"""

import itertools
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Type, TYPE_CHECKING

from pydantic import ValidationError

from web_replay.exceptions import ExecutorUnavailableError
from web_replay.executor.human_typing import HumanTyper
from web_replay.interfaces.browser import CaptureSink, ElementSnapshot
from web_replay.locators.resolver import LocatorResolver
from web_replay.messaging.protocol import (
    GetSteps,
    LocatorResolved,
    RecordingStarted,
    RecordingStopped,
    REQUEST_MODELS,
    ReplayClick,
    ReplayKeyPress,
    ReplayType,
    ResolveLocator,
    Response,
    StartRecording,
    StopRecording,
    parse_request,
)
from web_replay.recorder.recorder import StepRecorder

if TYPE_CHECKING:
    from web_replay.interfaces.browser import IElement, IPage
    from web_replay.messaging.protocol import Push

logger = logging.getLogger(__name__)

REF_PREFIX = "ref:"
_REQUEST_TYPES = frozenset(model.model_fields["type"].default for model in REQUEST_MODELS)


class PageExecutor(CaptureSink):
    """
    Executor bound to one page load.

    ``initialize()`` is guarded: calling it on an already active executor
    is a no-op. Once the page loads a new document the executor is stale
    and refuses delivery; element references it issued die with it.

    Example:
        >>> executor = PageExecutor(page, recorder, push=orchestrator.receive)
        >>> await executor.initialize()
        >>> response = await executor.deliver({"type": "GET_STEPS"})
    """

    def __init__(
        self,
        page: "IPage",
        recorder: StepRecorder,
        push: Callable[["Push"], None],
        resolver: Optional[LocatorResolver] = None,
        typer: Optional[HumanTyper] = None,
    ):
        self.page = page
        self.load_id = page.load_id
        self.recorder = recorder
        self._push = push
        self._resolver = resolver or LocatorResolver()
        self._typer = typer or HumanTyper()
        self._active = False
        self._refs: Dict[str, "IElement"] = {}
        self._ref_counter = itertools.count(1)

        self._handlers: Dict[Type, Callable[[Any], Awaitable[Response]]] = {
            StartRecording: self._start_recording,
            StopRecording: self._stop_recording,
            GetSteps: self._get_steps,
            ResolveLocator: self._resolve_locator,
            ReplayClick: self._replay_click,
            ReplayType: self._replay_type,
            ReplayKeyPress: self._replay_key_press,
        }

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_stale(self) -> bool:
        """True once the page closed or loaded another document."""
        return self.page.is_closed or self.page.load_id != self.load_id

    async def initialize(self) -> None:
        """Attach to the page. A second call is a guarded no-op."""
        if self._active:
            logger.debug(f"Executor for load {self.load_id} already active, skipping")
            return
        self._active = True
        await self.page.install_capture(self)
        logger.debug(f"Executor active for load {self.load_id}")

    async def deliver(self, message: Dict[str, Any]) -> Response:
        """
        Deliver a request across the page boundary.

        Raises:
            ExecutorUnavailableError: If the executor is not active or stale
        """
        if not self._active or self.is_stale:
            raise ExecutorUnavailableError(
                f"No active executor for page load {self.load_id}",
                load_id=self.load_id,
            )
        return await self.handle(message)

    async def handle(self, message: Dict[str, Any]) -> Response:
        """
        Carry out one request.

        Unknown or malformed requests get a failure response, never an
        exception.
        """
        message_type = message.get("type") if isinstance(message, dict) else None
        if message_type not in _REQUEST_TYPES:
            logger.warning(f"Unknown message type: {message_type}")
            return Response.fail("Unknown message type")

        try:
            request = parse_request(message)
        except ValidationError as e:
            logger.warning(f"Malformed {message_type} message: {e.error_count()} error(s)")
            return Response.fail(f"Invalid {message_type} message")

        handler = self._handlers[type(request)]
        try:
            return await handler(request)
        except Exception as e:
            logger.error(f"Error handling {message_type}: {e}")
            return Response.fail(str(e))

    # =========================================================================
    # Capture
    # =========================================================================

    def on_click(self, target: ElementSnapshot) -> None:
        self.recorder.on_click(target)

    def on_input(self, text: str, editable: bool) -> None:
        self.recorder.on_input(text, editable)

    def on_keydown(self, key: str, text: Optional[str], editable: bool) -> None:
        self.recorder.on_keydown(key, text, editable)

    def on_url_change(self, url: str) -> None:
        self.recorder.on_url_change(url)

    # =========================================================================
    # Request handlers
    # =========================================================================

    async def _start_recording(self, request: StartRecording) -> Response:
        self.recorder.start(self.page.url)
        self._send_push(RecordingStarted(start_time=self.recorder.start_time))
        return Response.ok()

    async def _stop_recording(self, request: StopRecording) -> Response:
        steps = self.recorder.stop()
        self._send_push(RecordingStopped(steps=steps))
        return Response.ok()

    async def _get_steps(self, request: GetSteps) -> Response:
        return Response.ok(steps=self.recorder.steps)

    async def _resolve_locator(self, request: ResolveLocator) -> Response:
        target = await self._resolver.resolve(self.page, request.locators)

        selector = target.selector
        if target.element is not None:
            selector = self._register_ref(target.element)

        self._send_push(LocatorResolved(
            message_id=request.message_id,
            selector=selector,
            locator_type=target.strategy,
        ))
        return Response.ok()

    async def _replay_click(self, request: ReplayClick) -> Response:
        element = await self._lookup(request.selector)
        if element is None:
            logger.warning(f"Element not found for selector: {request.selector}")
            return Response.fail(f"Element not found: {request.selector}")

        await element.click()
        await element.dispatch_event("click")
        logger.debug(f"Clicked {request.selector}")
        return Response.ok()

    async def _replay_type(self, request: ReplayType) -> Response:
        if await self._typer.type_text(self.page, request.text):
            return Response.ok()
        return Response.fail("No suitable element found for typing")

    async def _replay_key_press(self, request: ReplayKeyPress) -> Response:
        element = await self.page.active_element()
        if element is None:
            logger.warning("No active element for key press")
            return Response.fail("No active element for key press")

        await element.dispatch_event("keydown", {
            "key": request.key,
            "code": request.key,
            "bubbles": True,
            "cancelable": True,
        })
        logger.debug(f"Pressed {request.key}")
        return Response.ok()

    # =========================================================================
    # Element references
    # =========================================================================

    def _register_ref(self, element: "IElement") -> str:
        ref = f"{REF_PREFIX}{self.load_id}-{next(self._ref_counter)}"
        self._refs[ref] = element
        return ref

    async def _lookup(self, selector: str) -> Optional["IElement"]:
        if selector.startswith(REF_PREFIX):
            element = self._refs.get(selector)
            if element is None:
                logger.warning(f"Stale element reference: {selector}")
            return element
        return await self.page.query_selector(selector)

    def _send_push(self, message: "Push") -> None:
        try:
            self._push(message)
        except Exception as e:
            logger.warning(f"Failed to push {message.type}: {e}")
