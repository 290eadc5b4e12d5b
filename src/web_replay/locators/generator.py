"""
Locator Generator - Ranked locator list for a captured element.

Every applicable strategy is emitted; the list is a ranked menu, most
reliable first, not a single choice:

1. role (explicit role + derived name)
2. data-testid
3. id (non-dynamic only)
4. href (anchors, path only)
5. title
6. text (trimmed, shorter than the configured bound)
7. semantic controls (web-search, composer-plus, ...)
8. css
9. xpath
"""

from typing import Callable, Iterable, List, Optional
import logging

from web_replay.interfaces.browser import ElementSnapshot
from web_replay.locators.models import (
    CssLocator,
    DataTestIdLocator,
    HrefLocator,
    IdLocator,
    Locator,
    RoleLocator,
    TextLocator,
    TitleLocator,
    XPathLocator,
)
from web_replay.locators.selectors import (
    build_css_selector,
    build_xpath,
    href_path,
    stable_id,
)
from web_replay.locators.semantic import SEMANTIC_PROFILES, SemanticProfile

logger = logging.getLogger(__name__)


class LocatorGenerator:
    """
    Generate the ordered locator list for an element.

    Generation is a pure function of the snapshot: generating twice for
    an unchanged element yields the same list. A failure while building
    one locator drops that locator only.

    Example:
        >>> generator = LocatorGenerator()
        >>> locators = generator.generate(snapshot)
        >>> locators[0].type
        'data-testid'
    """

    def __init__(
        self,
        max_text_length: int = 100,
        xpath_max_depth: int = 5,
        max_css_classes: int = 3,
        semantic_kinds: Optional[Iterable[str]] = None,
    ):
        """
        Initialize the generator.

        Args:
            max_text_length: Text locators are emitted only below this length
            xpath_max_depth: Ancestor levels for positional XPath
            max_css_classes: Class names kept in generated CSS
            semantic_kinds: Semantic profiles to test (default: all registered)
        """
        self._max_text_length = max_text_length
        self._xpath_max_depth = xpath_max_depth
        self._max_css_classes = max_css_classes
        kinds = list(semantic_kinds) if semantic_kinds is not None else list(SEMANTIC_PROFILES)
        unknown = [kind for kind in kinds if kind not in SEMANTIC_PROFILES]
        if unknown:
            raise ValueError(f"Unknown semantic locator kinds: {unknown}")
        self._profiles: List[SemanticProfile] = [SEMANTIC_PROFILES[kind] for kind in kinds]

    def generate(self, snapshot: ElementSnapshot) -> List[Locator]:
        """
        Generate locators for an element.

        Args:
            snapshot: The element as captured

        Returns:
            Locators ordered by decreasing reliability
        """
        builders: List[Callable[[ElementSnapshot], List[Locator]]] = [
            self._role,
            self._test_id,
            self._id,
            self._href,
            self._title,
            self._text,
            self._semantic,
            self._css,
            self._xpath,
        ]

        locators: List[Locator] = []
        for build in builders:
            try:
                locators.extend(build(snapshot))
            except Exception as e:
                logger.debug(f"Skipping locator {build.__name__}: {e}")

        logger.debug(f"Generated {len(locators)} locators for <{snapshot.tag_name}>")
        return locators

    def _role(self, snapshot: ElementSnapshot) -> List[Locator]:
        role = snapshot.attributes.get("role")
        if not role:
            return []
        name = (
            snapshot.attributes.get("name")
            or snapshot.attributes.get("aria-label")
            or snapshot.trimmed_text
        )
        if not name:
            return []
        return [RoleLocator(role=role, name=name)]

    def _test_id(self, snapshot: ElementSnapshot) -> List[Locator]:
        test_id = snapshot.attributes.get("data-testid")
        return [DataTestIdLocator(value=test_id)] if test_id else []

    def _id(self, snapshot: ElementSnapshot) -> List[Locator]:
        element_id = stable_id(snapshot)
        return [IdLocator(value=element_id)] if element_id else []

    def _href(self, snapshot: ElementSnapshot) -> List[Locator]:
        if snapshot.tag_name != "a" or not snapshot.href:
            return []
        path = href_path(snapshot.href)
        return [HrefLocator(path=path)] if path else []

    def _title(self, snapshot: ElementSnapshot) -> List[Locator]:
        title = snapshot.attributes.get("title")
        return [TitleLocator(value=title)] if title else []

    def _text(self, snapshot: ElementSnapshot) -> List[Locator]:
        text = snapshot.trimmed_text
        if text and len(text) < self._max_text_length:
            return [TextLocator(content=text)]
        return []

    def _semantic(self, snapshot: ElementSnapshot) -> List[Locator]:
        return [profile.to_locator() for profile in self._profiles if profile.matches(snapshot)]

    def _css(self, snapshot: ElementSnapshot) -> List[Locator]:
        selector = build_css_selector(snapshot, self._max_css_classes)
        return [CssLocator(selector=selector)] if selector else []

    def _xpath(self, snapshot: ElementSnapshot) -> List[Locator]:
        path = build_xpath(snapshot, self._xpath_max_depth)
        return [XPathLocator(path=path)] if path else []
