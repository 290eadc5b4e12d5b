"""
Messenger - Request/response channel from the orchestrator to the page.

The executing side may not exist yet, or may have been torn down by a
navigation. Every send first ensures an executor is injected; a failed
delivery is retried exactly once (re-inject, settle, resend) and a second
failure is reported as ``None``.

Locator resolution is answered asynchronously by a LOCATOR_RESOLVED push.
Requests and pushes are correlated by message id through a table of
pending futures, and the whole round trip is bounded by its own timeout.
"""

import asyncio
import logging
import uuid
from typing import Any, Dict, Optional, Sequence, Union, TYPE_CHECKING

from web_replay.exceptions import ExecutorUnavailableError, MessagingError
from web_replay.messaging.protocol import LocatorResolved, ResolveLocator, Response, Message
from web_replay.utils.retry import RetryConfig, retry_async, with_timeout

if TYPE_CHECKING:
    from web_replay.executor.registry import ExecutorRegistry
    from web_replay.interfaces.browser import IPage
    from web_replay.locators.models import Locator

logger = logging.getLogger(__name__)


class Messenger:
    """
    Deliver typed requests to the executor of a page.

    Example:
        >>> messenger = Messenger(registry, page)
        >>> response = await messenger.send(ReplayKeyPress(key="Enter"))
        >>> resolved = await messenger.resolve_locator(step.target.locators)
        >>> resolved.selector
        '[data-testid="go"]'
    """

    def __init__(
        self,
        registry: "ExecutorRegistry",
        page: Optional["IPage"] = None,
        retry_delay_ms: int = 1000,
        resolve_timeout_ms: int = 5000,
    ):
        """
        Initialize the messenger.

        Args:
            registry: Executor registry used to (re-)inject executors
            page: Target page
            retry_delay_ms: Settle delay before the single resend
            resolve_timeout_ms: Bound on a locator resolution round trip
        """
        self.registry = registry
        self.page = page
        self.retry_delay_ms = retry_delay_ms
        self.resolve_timeout_ms = resolve_timeout_ms
        self._pending: Dict[str, asyncio.Future] = {}

    @property
    def pending_resolutions(self) -> int:
        return len(self._pending)

    async def send(self, message: Union[Message, Dict[str, Any]]) -> Optional[Response]:
        """
        Send a request to the page executor.

        Args:
            message: Request model or raw request dictionary

        Returns:
            The executor's response, or None if delivery failed twice
        """
        payload = message.to_wire() if isinstance(message, Message) else dict(message)
        config = RetryConfig(
            max_attempts=2,
            delay_ms=self.retry_delay_ms,
            retry_on=(MessagingError,),
            on_retry=self._reinject,
        )

        try:
            return await retry_async(self._deliver, config, payload)
        except MessagingError as e:
            logger.warning(f"Delivery of {payload.get('type')} failed after retry: {e}")
            return None

    async def resolve_locator(self, locators: Sequence["Locator"]) -> LocatorResolved:
        """
        Resolve a locator list on the page.

        The resolution timeout starts once the request is delivered, so the
        delivery retry does not count against it.

        Returns:
            The correlated LOCATOR_RESOLVED push; ``selector`` is None when
            nothing matched, delivery failed, or the timeout expired
        """
        message_id = uuid.uuid4().hex
        future = asyncio.get_running_loop().create_future()
        self._pending[message_id] = future

        try:
            response = await self.send(ResolveLocator(locators=list(locators), message_id=message_id))
            if response is None or not response.success:
                return LocatorResolved(message_id=message_id)
            return await with_timeout(
                future,
                self.resolve_timeout_ms / 1000,
                f"Locator resolution {message_id} timed out",
            )
        except asyncio.TimeoutError as e:
            logger.warning(str(e))
            return LocatorResolved(message_id=message_id)
        finally:
            self._pending.pop(message_id, None)

    def on_locator_resolved(self, push: LocatorResolved) -> bool:
        """
        Complete the pending resolution a push answers.

        Returns:
            False for a push nobody waits for (late or unknown id)
        """
        future = self._pending.get(push.message_id)
        if future is None or future.done():
            logger.debug(f"Ignoring uncorrelated LOCATOR_RESOLVED {push.message_id}")
            return False
        future.set_result(push)
        return True

    async def _deliver(self, payload: Dict[str, Any]) -> Response:
        if self.page is None:
            raise ExecutorUnavailableError("No target page")

        try:
            executor = await self.registry.ensure(self.page)
        except MessagingError:
            raise
        except Exception as e:
            raise ExecutorUnavailableError(f"Executor injection failed: {e}") from e

        return await executor.deliver(payload)

    async def _reinject(self, attempt: int, error: Exception) -> None:
        if self.page is None or self.page.is_closed:
            return
        try:
            await self.registry.ensure(self.page)
        except Exception as e:
            logger.warning(f"Re-injection failed: {e}")
