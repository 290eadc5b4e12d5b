"""
Human Typer - Character-by-character text entry with human-like timing.

Each character is appended separately and fires its own ``input`` event so
that reactive UIs see incremental input. The pause after a character is
longer after whitespace, longer still after sentence punctuation, and always
carries a little random jitter.

Typing runs as a coroutine that suspends between characters; cancelling
the task abandons the rest of the text at the next character boundary.
"""

import asyncio
import random
from typing import Awaitable, Callable, Optional, Sequence, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from web_replay.config.settings import ReplaySettings
    from web_replay.interfaces.browser import IElement, IPage

logger = logging.getLogger(__name__)

DEFAULT_INPUT_SELECTORS = (
    'textarea[placeholder*="Message"]',
    'textarea[placeholder*="Send"]',
    'input[type="text"]',
    "textarea",
    'div[contenteditable="true"]',
)

PUNCTUATION = ".,!?"


class HumanTyper:
    """
    Type text into the focused editable element, or a fallback input.

    Example:
        >>> typer = HumanTyper(jitter_ms=0)
        >>> ok = await typer.type_text(page, "hello")
    """

    def __init__(
        self,
        base_delay_ms: int = 50,
        space_delay_ms: int = 100,
        punctuation_delay_ms: int = 200,
        newline_delay_ms: int = 150,
        jitter_ms: int = 30,
        input_selectors: Sequence[str] = DEFAULT_INPUT_SELECTORS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Callable[[], float] = random.random,
    ):
        self.base_delay_ms = base_delay_ms
        self.space_delay_ms = space_delay_ms
        self.punctuation_delay_ms = punctuation_delay_ms
        self.newline_delay_ms = newline_delay_ms
        self.jitter_ms = jitter_ms
        self.input_selectors = list(input_selectors)
        self._sleep = sleep
        self._rng = rng

    @classmethod
    def from_settings(cls, settings: "ReplaySettings", **kwargs) -> "HumanTyper":
        """Create a typer from replay settings."""
        return cls(
            base_delay_ms=settings.typing_base_delay_ms,
            space_delay_ms=settings.typing_space_delay_ms,
            punctuation_delay_ms=settings.typing_punctuation_delay_ms,
            newline_delay_ms=settings.typing_newline_delay_ms,
            jitter_ms=settings.typing_jitter_ms,
            input_selectors=settings.input_selectors,
            **kwargs,
        )

    def delay_ms(self, char: str) -> float:
        """Pause after typing ``char``, jitter included."""
        if char == " ":
            delay = self.space_delay_ms
        elif char in PUNCTUATION:
            delay = self.punctuation_delay_ms
        elif char == "\n":
            delay = self.newline_delay_ms
        else:
            delay = self.base_delay_ms
        return delay + self._rng() * self.jitter_ms

    async def find_target(self, page: "IPage") -> Optional["IElement"]:
        """
        The element to type into.

        The focused element if it is editable, else the first element
        matching one of the fallback input selectors.
        """
        active = await page.active_element()
        if active is not None and await active.is_editable():
            return active

        for selector in self.input_selectors:
            try:
                element = await page.query_selector(selector)
            except Exception as e:
                logger.debug(f"Input selector {selector} failed: {e}")
                continue
            if element is not None:
                return element
        return None

    async def type_text(self, page: "IPage", text: str) -> bool:
        """
        Clear the target and type ``text`` into it.

        Returns:
            False if no editable target exists, True once every character
            has been typed
        """
        element = await self.find_target(page)
        if element is None or not await element.is_editable():
            logger.warning("No suitable element found for typing")
            return False

        await element.clear()
        await element.focus()

        logger.debug(f"Typing {len(text)} characters")
        for index, char in enumerate(text):
            await element.append_text(char)
            logger.debug(f"Typed character {index + 1}/{len(text)}: {char!r}")
            await self._sleep(self.delay_ms(char) / 1000)

        logger.info(f"Typing completed: {text!r}")
        return True
