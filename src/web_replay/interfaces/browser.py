"""
Browser Interface - Abstract base classes for the pages Web Replay drives.

This module defines the contract that page implementations (live Playwright
pages, offline HTML snapshots) must follow so that the locator resolver and
the page-side executor can work against either of them.

Example:
    >>> from web_replay.browsers import SnapshotPage
    >>> page = SnapshotPage("<button data-testid='go'>Go</button>", url="https://example.com")
    >>> element = await page.query_selector("[data-testid='go']")
    >>> await element.click()
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


@dataclass(frozen=True)
class PathSegment:
    """
    One step of an element's ancestor chain.

    Attributes:
        tag: Lower-case tag name
        position: 1-based index among preceding siblings with the same tag
        same_tag_siblings: Number of other siblings sharing the tag
    """
    tag: str
    position: int = 1
    same_tag_siblings: int = 0


@dataclass
class ElementSnapshot:
    """
    A serialisable description of one element as observed at capture time.

    This is everything the locator generator is allowed to look at, so that
    generating locators twice for the same unchanged element gives the same
    result, and so that the snapshot can travel across the page boundary.

    Attributes:
        tag_name: Lower-case tag name
        attributes: Attribute map as present in the DOM
        text_content: Raw textContent (not trimmed)
        href: Fully resolved href for anchors (None otherwise)
        path: Ancestor chain, element first, towards the document root
        truncated: True when the chain stops before reaching the root
    """
    tag_name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    text_content: str = ""
    href: Optional[str] = None
    path: List[PathSegment] = field(default_factory=list)
    truncated: bool = False

    @property
    def id(self) -> Optional[str]:
        """Get the element's id attribute."""
        return self.attributes.get("id") or None

    @property
    def class_list(self) -> List[str]:
        """Get the element's class list."""
        class_attr = self.attributes.get("class", "")
        return class_attr.split() if class_attr else []

    @property
    def trimmed_text(self) -> str:
        return (self.text_content or "").strip()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ElementSnapshot":
        """Create from the dictionary reported by the capture script."""
        return cls(
            tag_name=str(data.get("tag_name") or data.get("tag") or "").lower(),
            attributes={str(k): str(v) for k, v in (data.get("attributes") or {}).items()},
            text_content=data.get("text_content") or "",
            href=data.get("href") or None,
            path=[
                PathSegment(
                    tag=str(seg.get("tag", "")).lower(),
                    position=int(seg.get("position", 1)),
                    same_tag_siblings=int(seg.get("same_tag_siblings", 0)),
                )
                for seg in data.get("path") or []
            ],
            truncated=bool(data.get("truncated", False)),
        )


class CaptureSink(ABC):
    """
    Receiver of raw page events while a page is being observed.

    Pages call these synchronously from their event callbacks.
    """

    @abstractmethod
    def on_click(self, target: ElementSnapshot) -> None:
        """A click landed on ``target``."""
        ...

    @abstractmethod
    def on_input(self, text: str, editable: bool) -> None:
        """
        An input event fired.

        Args:
            text: Current value (or text content) of the event target
            editable: Whether the target is an input, textarea or contenteditable
        """
        ...

    @abstractmethod
    def on_keydown(self, key: str, text: Optional[str], editable: bool) -> None:
        """
        A key went down.

        Args:
            key: The DOM ``KeyboardEvent.key`` value
            text: Current value of the event target, if it has one
            editable: Whether the target is an input, textarea or contenteditable
        """
        ...

    @abstractmethod
    def on_url_change(self, url: str) -> None:
        """The page's effective URL changed."""
        ...


class IElement(ABC):
    """
    Abstract interface for interacting with a live DOM element.
    """

    @abstractmethod
    async def tag_name(self) -> str:
        """Lower-case tag name."""
        ...

    @abstractmethod
    async def get_attribute(self, name: str) -> Optional[str]:
        """
        Get an attribute value from this element.

        Args:
            name: The attribute name

        Returns:
            The attribute value, or None if not present
        """
        ...

    @abstractmethod
    async def text_content(self) -> Optional[str]:
        """Raw text content of this element and its descendants."""
        ...

    @abstractmethod
    async def is_rendered(self) -> bool:
        """
        Check whether the element is visually rendered.

        Rendered means a non-zero bounding box or a non-null offset parent.
        """
        ...

    @abstractmethod
    async def is_editable(self) -> bool:
        """True for input, textarea and contenteditable="true" elements."""
        ...

    @abstractmethod
    async def focus(self) -> None:
        """Give this element keyboard focus."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Remove the current value (or text content) of an editable element."""
        ...

    @abstractmethod
    async def append_text(self, char: str) -> None:
        """
        Append text to an editable element and fire a bubbling ``input`` event.

        Args:
            char: Text to append, normally one character
        """
        ...

    @abstractmethod
    async def click(self) -> None:
        """Native activation (``element.click()``)."""
        ...

    @abstractmethod
    async def dispatch_event(self, event_type: str, init: Optional[Dict[str, Any]] = None) -> None:
        """
        Dispatch a synthetic bubbling event at this element.

        Args:
            event_type: DOM event type, e.g. ``click`` or ``keydown``
            init: Event init properties (key, code, ...)
        """
        ...

    @abstractmethod
    async def snapshot(self, max_depth: int = 8) -> ElementSnapshot:
        """
        Describe this element for locator generation.

        Args:
            max_depth: Maximum number of path segments to collect
        """
        ...


class IPage(ABC):
    """
    Abstract interface for the page a recording or replay runs against.

    A page has a load identity that changes every time a new document is
    loaded; page-side executors are scoped to one load.
    """

    @property
    @abstractmethod
    def url(self) -> str:
        """Current URL."""
        ...

    @property
    @abstractmethod
    def load_id(self) -> int:
        """Identity of the currently loaded document."""
        ...

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        ...

    @abstractmethod
    async def goto(self, url: str) -> None:
        """
        Navigate to a URL.

        Raises:
            NavigationError: If navigation fails
        """
        ...

    @abstractmethod
    async def query_selector(self, selector: str) -> Optional[IElement]:
        """
        First element matching a CSS selector.

        Raises:
            Exception: Implementation specific, for malformed selectors
        """
        ...

    @abstractmethod
    async def query_selector_all(self, selector: str) -> List[IElement]:
        """All elements matching a CSS selector, in document order."""
        ...

    @abstractmethod
    async def query_xpath(self, path: str) -> Optional[IElement]:
        """First element (in document order) selected by an XPath expression."""
        ...

    @abstractmethod
    async def active_element(self) -> Optional[IElement]:
        """The focused element; the body when nothing else is focused."""
        ...

    @abstractmethod
    async def install_capture(self, sink: CaptureSink) -> None:
        """
        Route raw page events (click, input, keydown, URL change) to ``sink``.

        Installing again replaces the previous sink.
        """
        ...

    @abstractmethod
    def on_new_document(self, callback: Callable[[], Any]) -> None:
        """Register a callback run every time a new document is loaded."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the page."""
        ...
