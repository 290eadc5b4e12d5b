"""
Locator Resolver - Re-find a captured element on a live page.

Candidates are tried strictly in list order and resolution stops at the
first success. Per-type policy:

- semantic: delegated to the profile's SemanticFinder
- data-testid: attribute equality, accepted only if exactly one match
- role: role+name, then role+aria-label, then a scan of the role's elements
  comparing trimmed text or aria-label to the stored name
- id / title: attribute equality, accepted if present
- href: substring match on the stored path, first match
- text: full-document scan for an exact trimmed-text match (most expensive)
- css / xpath: evaluated directly

A failing locator (malformed selector, evaluation error) only skips that
locator. When nothing resolves the result is ``ResolvedTarget.no_match()``,
never an exception.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Sequence, Type, Union, TYPE_CHECKING
import logging

from web_replay.locators.models import (
    CssLocator,
    DataTestIdLocator,
    HrefLocator,
    IdLocator,
    Locator,
    RoleLocator,
    SemanticLocator,
    TextLocator,
    TitleLocator,
    XPathLocator,
)
from web_replay.locators.selectors import attribute_selector, css_escape
from web_replay.locators.semantic import SEMANTIC_PROFILES, SemanticFinder, SemanticProfile

if TYPE_CHECKING:
    from web_replay.interfaces.browser import IElement, IPage

logger = logging.getLogger(__name__)

Match = Union[str, "IElement"]


@dataclass
class ResolvedTarget:
    """
    Outcome of resolving a locator list.

    Exactly one of ``selector`` / ``element`` is set when resolved.

    Attributes:
        selector: A selector still valid on the live page
        element: The matched element when no selector describes it
        locator: The locator that produced the match
    """
    selector: Optional[str] = None
    element: Optional["IElement"] = None
    locator: Optional[Locator] = None

    @property
    def is_resolved(self) -> bool:
        return self.selector is not None or self.element is not None

    @property
    def strategy(self) -> Optional[str]:
        """Type of the winning locator."""
        return self.locator.type if self.locator is not None else None

    @classmethod
    def no_match(cls) -> "ResolvedTarget":
        return cls()


class LocatorResolver:
    """
    Resolve ordered locator lists against a page.

    Example:
        >>> resolver = LocatorResolver()
        >>> target = await resolver.resolve(page, step.target.locators)
        >>> if target.is_resolved:
        ...     print(target.strategy)
    """

    def __init__(self, semantic_profiles: Optional[Dict[str, SemanticProfile]] = None):
        """
        Initialize the resolver.

        Args:
            semantic_profiles: Finder profiles by locator kind (default: all registered)
        """
        profiles = semantic_profiles if semantic_profiles is not None else SEMANTIC_PROFILES
        self._finders = {kind: SemanticFinder(profile) for kind, profile in profiles.items()}
        self._handlers: Dict[Type, Callable[["IPage", Locator], Awaitable[Optional[Match]]]] = {
            SemanticLocator: self._resolve_semantic,
            DataTestIdLocator: self._resolve_test_id,
            RoleLocator: self._resolve_role,
            IdLocator: self._resolve_id,
            HrefLocator: self._resolve_href,
            TitleLocator: self._resolve_title,
            TextLocator: self._resolve_text,
            CssLocator: self._resolve_css,
            XPathLocator: self._resolve_xpath,
        }

    @property
    def supported_types(self) -> tuple:
        return tuple(self._handlers)

    async def resolve(self, page: "IPage", locators: Sequence[Locator]) -> ResolvedTarget:
        """
        Try each locator in order and return the first match.

        Args:
            page: Live page to search
            locators: Ranked locator list

        Returns:
            The resolved target, or ``ResolvedTarget.no_match()``
        """
        for locator in locators:
            handler = self._handlers.get(type(locator))
            if handler is None:
                raise TypeError(f"No resolution handler for {type(locator).__name__}")

            logger.debug(f"Trying locator: {locator.type}")
            try:
                match = await handler(page, locator)
            except Exception as e:
                logger.debug(f"Locator {locator.type} failed: {e}")
                continue

            if match is None:
                continue

            logger.info(f"Resolved element via {locator.type} locator")
            if isinstance(match, str):
                return ResolvedTarget(selector=match, locator=locator)
            return ResolvedTarget(element=match, locator=locator)

        logger.warning(f"No locator resolved ({len(locators)} tried)")
        return ResolvedTarget.no_match()

    async def _first_selector(self, page: "IPage", selector: str) -> Optional[str]:
        return selector if await page.query_selector(selector) is not None else None

    async def _resolve_semantic(self, page: "IPage", locator: SemanticLocator) -> Optional[Match]:
        finder = self._finders.get(locator.type)
        if finder is None:
            logger.debug(f"No finder registered for {locator.type}")
            return None
        return await finder.find(page)

    async def _resolve_test_id(self, page: "IPage", locator: DataTestIdLocator) -> Optional[Match]:
        selector = attribute_selector("data-testid", locator.value)
        matches = await page.query_selector_all(selector)
        return selector if len(matches) == 1 else None

    async def _resolve_role(self, page: "IPage", locator: RoleLocator) -> Optional[Match]:
        if not locator.role or not locator.name:
            return None

        role_selector = attribute_selector("role", locator.role)
        for attr in ("name", "aria-label"):
            selector = role_selector + attribute_selector(attr, locator.name)
            if await page.query_selector(selector) is not None:
                return selector

        for element in await page.query_selector_all(role_selector):
            text = (await element.text_content() or "").strip()
            if text == locator.name or await element.get_attribute("aria-label") == locator.name:
                return element
        return None

    async def _resolve_id(self, page: "IPage", locator: IdLocator) -> Optional[Match]:
        if not locator.value:
            return None
        return await self._first_selector(page, "#" + css_escape(locator.value))

    async def _resolve_href(self, page: "IPage", locator: HrefLocator) -> Optional[Match]:
        if not locator.path:
            return None
        return await self._first_selector(page, "a" + attribute_selector("href", locator.path, "*="))

    async def _resolve_title(self, page: "IPage", locator: TitleLocator) -> Optional[Match]:
        if not locator.value:
            return None
        return await self._first_selector(page, attribute_selector("title", locator.value))

    async def _resolve_text(self, page: "IPage", locator: TextLocator) -> Optional[Match]:
        if not locator.content:
            return None
        for element in await page.query_selector_all("*"):
            text = await element.text_content()
            if text and text.strip() == locator.content:
                return element
        return None

    async def _resolve_css(self, page: "IPage", locator: CssLocator) -> Optional[Match]:
        if not locator.selector:
            return None
        return await self._first_selector(page, locator.selector)

    async def _resolve_xpath(self, page: "IPage", locator: XPathLocator) -> Optional[Match]:
        if not locator.path:
            return None
        return await page.query_xpath(locator.path)
