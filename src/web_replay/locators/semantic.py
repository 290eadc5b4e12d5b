"""
Semantic Locators - Controls recognised by their role in an application.

Some targets (a chat app's "web search" toggle, the composer's "+" button)
carry no stable attribute at all. At capture time they are recognised by a
disjunction of substring tests over text, aria-label, title and test id; at
replay time a dedicated finder searches for them with a fixed escalation:

1. FIXED - known attribute-substring selectors
2. ROLE - menu items whose label contains a known phrase
3. SCAN - every element of a bounded class (buttons) tested by substring
4. TOGGLE - toggle-like elements whose class names hint at the control
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, TYPE_CHECKING
import logging

from web_replay.interfaces.browser import ElementSnapshot
from web_replay.locators.models import SemanticLocator
from web_replay.locators.selectors import attribute_selector

if TYPE_CHECKING:
    from web_replay.interfaces.browser import IElement, IPage

logger = logging.getLogger(__name__)

MENU_ROLES = ("menuitem", "menuitemcheckbox", "menuitemradio")
TOGGLE_SELECTOR = '[aria-pressed], [aria-checked], [role="switch"], [data-state]'


@dataclass(frozen=True)
class SemanticProfile:
    """
    How to recognise and re-find one kind of semantic control.

    Attributes:
        kind: Locator type emitted for this control
        description: Human-readable description stored in the locator
        needles: Lower-case phrases, any of which identifies the control
        fixed_selectors: Known selectors, tried first at replay
        scan_selector: Element class scanned in the full-scan pass
        toggle_class_hints: Class-name fragments for the toggle pass
        require_rendered: Only accept visually rendered candidates
    """
    kind: str
    description: str
    needles: Tuple[str, ...]
    fixed_selectors: Tuple[str, ...] = ()
    scan_selector: str = "button"
    toggle_class_hints: Tuple[str, ...] = ()
    require_rendered: bool = False

    def matches_text(self, *values: Optional[str]) -> bool:
        for value in values:
            lowered = (value or "").lower()
            if lowered and any(needle in lowered for needle in self.needles):
                return True
        return False

    def matches(self, snapshot: ElementSnapshot) -> bool:
        """Capture-time predicate: does this snapshot look like the control?"""
        attrs = snapshot.attributes
        return self.matches_text(
            snapshot.text_content,
            attrs.get("aria-label"),
            attrs.get("title"),
            attrs.get("data-testid"),
        )

    def to_locator(self) -> SemanticLocator:
        return SemanticLocator(type=self.kind, description=self.description)


WEB_SEARCH = SemanticProfile(
    kind="web-search",
    description="Web search button",
    needles=("web search", "search the web"),
    fixed_selectors=tuple(
        f"button{attribute_selector(attr, phrase, '*=')}"
        for phrase in ("Web search", "Search the web", "web search", "search the web")
        for attr in ("aria-label", "title")
    ),
    toggle_class_hints=("web-search", "websearch", "search-toggle"),
)

# The composer of the current chat; hidden copies of it live in other
# (inactive) threads, hence the rendering requirement.
COMPOSER_PLUS = SemanticProfile(
    kind="composer-plus",
    description="Composer add-attachment button",
    needles=("composer-plus", "add photos", "add files", "attach files", "upload files"),
    fixed_selectors=(
        '[data-testid="composer-plus-btn"]',
        '[data-testid*="composer-plus"]',
        'button[aria-label*="Add photos"]',
        'button[aria-label*="Add files"]',
        'button[aria-label*="Attach"]',
    ),
    toggle_class_hints=("composer-plus", "composer-btn"),
    require_rendered=True,
)

SEMANTIC_PROFILES: Dict[str, SemanticProfile] = {
    profile.kind: profile for profile in (WEB_SEARCH, COMPOSER_PLUS)
}


class SemanticFinder:
    """
    Re-find a semantic control on a live page.

    Example:
        >>> finder = SemanticFinder(WEB_SEARCH)
        >>> element = await finder.find(page)
    """

    def __init__(self, profile: SemanticProfile):
        self.profile = profile

    async def find(self, page: "IPage") -> Optional["IElement"]:
        """
        Run the escalating search.

        Returns:
            The first acceptable element, or None
        """
        for stage in (self._find_fixed, self._find_by_role, self._find_by_scan, self._find_by_toggle):
            element = await stage(page)
            if element is not None:
                logger.debug(f"{self.profile.kind}: found via {stage.__name__}")
                return element

        logger.debug(f"{self.profile.kind}: no candidate found")
        return None

    async def _accept(self, element: "IElement") -> bool:
        if not self.profile.require_rendered:
            return True
        return await element.is_rendered()

    async def _element_matches(self, element: "IElement") -> bool:
        return self.profile.matches_text(
            await element.text_content(),
            await element.get_attribute("aria-label"),
            await element.get_attribute("title"),
            await element.get_attribute("data-testid"),
        )

    async def _find_fixed(self, page: "IPage") -> Optional["IElement"]:
        for selector in self.profile.fixed_selectors:
            for element in await page.query_selector_all(selector):
                if await self._accept(element):
                    return element
        return None

    async def _find_by_role(self, page: "IPage") -> Optional["IElement"]:
        for role in MENU_ROLES:
            for element in await page.query_selector_all(attribute_selector("role", role)):
                label = (await element.text_content() or "").strip()
                aria_label = await element.get_attribute("aria-label")
                if self.profile.matches_text(label, aria_label) and await self._accept(element):
                    return element
        return None

    async def _find_by_scan(self, page: "IPage") -> Optional["IElement"]:
        for element in await page.query_selector_all(self.profile.scan_selector):
            if await self._element_matches(element) and await self._accept(element):
                return element
        return None

    async def _find_by_toggle(self, page: "IPage") -> Optional["IElement"]:
        if not self.profile.toggle_class_hints:
            return None
        for element in await page.query_selector_all(TOGGLE_SELECTOR):
            classes = (await element.get_attribute("class") or "").lower()
            if any(hint in classes for hint in self.profile.toggle_class_hints):
                if await self._accept(element):
                    return element
        return None
