"""
Snapshot Browser - IPage/IElement over a static HTML document.

Backed by lxml and cssselect, this page needs no browser: it answers CSS and
XPath queries, tracks focus and typed values, logs every dispatched event,
and can swap documents through a URL → HTML route table. It backs the
offline ``check`` command and lets tests drive capture and replay end to end.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union
from urllib.parse import urljoin
import logging

import lxml.html
from lxml import etree

from web_replay.exceptions import ElementNotFoundError, NavigationError, PageError
from web_replay.interfaces.browser import (
    CaptureSink,
    ElementSnapshot,
    IElement,
    IPage,
    PathSegment,
)

logger = logging.getLogger(__name__)

EDITABLE_TAGS = ("input", "textarea")


@dataclass
class DispatchedEvent:
    """
    One event fired at an element.

    Attributes:
        type: DOM event type
        target: Element the event was fired at
        init: Event init properties
        synthetic: False for native activation (``element.click()``)
    """
    type: str
    target: "SnapshotElement"
    init: Optional[Dict[str, Any]] = None
    synthetic: bool = True


def _style_hides(el: etree._Element) -> bool:
    style = (el.get("style") or "").replace(" ", "").lower()
    return "display:none" in style or "visibility:hidden" in style


class SnapshotElement(IElement):
    """An element of a SnapshotPage."""

    def __init__(self, element: etree._Element, page: "SnapshotPage"):
        self._el = element
        self._page = page

    @property
    def raw(self) -> etree._Element:
        """The underlying lxml element."""
        return self._el

    def __eq__(self, other: object) -> bool:
        return isinstance(other, SnapshotElement) and other._el is self._el

    def __hash__(self) -> int:
        return hash(id(self._el))

    def __repr__(self) -> str:
        return f"<SnapshotElement {self._el.tag} {dict(self._el.attrib)}>"

    @property
    def value(self) -> str:
        """Current value: the value attribute for inputs, text otherwise."""
        if self._el.tag == "input":
            return self._el.get("value") or ""
        return self._el.text_content()

    async def tag_name(self) -> str:
        return str(self._el.tag).lower()

    async def get_attribute(self, name: str) -> Optional[str]:
        return self._el.get(name)

    async def text_content(self) -> Optional[str]:
        return self._el.text_content()

    async def is_rendered(self) -> bool:
        if self._el.tag == "input" and (self._el.get("type") or "").lower() == "hidden":
            return False
        node = self._el
        while node is not None:
            if node.get("hidden") is not None or _style_hides(node):
                return False
            node = node.getparent()
        return True

    async def is_editable(self) -> bool:
        return self._el.tag in EDITABLE_TAGS or self._el.get("contenteditable") == "true"

    async def focus(self) -> None:
        self._page._focused = self._el
        self._page._log(DispatchedEvent("focus", self))

    async def clear(self) -> None:
        if self._el.tag == "input":
            self._el.set("value", "")
        else:
            for child in list(self._el):
                self._el.remove(child)
            self._el.text = ""

    async def append_text(self, char: str) -> None:
        if self._el.tag == "input":
            self._el.set("value", (self._el.get("value") or "") + char)
        else:
            self._el.text = (self._el.text or "") + char
        self._page._log(DispatchedEvent("input", self, {"bubbles": True}))

    async def click(self) -> None:
        self._page._log(DispatchedEvent("click", self, synthetic=False))

    async def dispatch_event(self, event_type: str, init: Optional[Dict[str, Any]] = None) -> None:
        self._page._log(DispatchedEvent(event_type, self, init))

    async def snapshot(self, max_depth: int = 8) -> ElementSnapshot:
        href = None
        if self._el.tag == "a" and self._el.get("href") is not None:
            href = urljoin(self._page.url, self._el.get("href"))

        path: List[PathSegment] = []
        node = self._el
        while node is not None and len(path) < max_depth:
            parent = node.getparent()
            siblings = [s for s in parent if s.tag == node.tag] if parent is not None else [node]
            path.append(PathSegment(
                tag=str(node.tag).lower(),
                position=siblings.index(node) + 1,
                same_tag_siblings=len(siblings) - 1,
            ))
            node = parent

        return ElementSnapshot(
            tag_name=str(self._el.tag).lower(),
            attributes={str(k): str(v) for k, v in self._el.attrib.items()},
            text_content=self._el.text_content(),
            href=href,
            path=path,
            truncated=node is not None,
        )


class SnapshotPage(IPage):
    """
    A page over static HTML.

    Example:
        >>> page = SnapshotPage("<button data-testid='go'>Go</button>", url="https://example.com/")
        >>> element = await page.query_selector('[data-testid="go"]')
        >>> await element.click()
        >>> page.events[0].type
        'click'
    """

    def __init__(
        self,
        html: str = "<html><body></body></html>",
        url: str = "about:blank",
        routes: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the page.

        Args:
            html: Initial document
            url: URL the document was loaded from
            routes: Documents served by ``goto``, keyed by URL
        """
        self._url = url
        self.routes: Dict[str, str] = dict(routes or {})
        self.events: List[DispatchedEvent] = []
        self._load_id = 0
        self._closed = False
        self._sink: Optional[CaptureSink] = None
        self._new_document_callbacks: List[Callable[[], Any]] = []
        self._doc: etree._Element
        self._focused: Optional[etree._Element] = None
        self._load(html)

    @classmethod
    def from_file(cls, path: str, url: Optional[str] = None) -> "SnapshotPage":
        """Load a saved HTML page."""
        with open(path, encoding="utf-8") as f:
            html = f.read()
        return cls(html, url=url or "about:blank")

    @property
    def url(self) -> str:
        return self._url

    @property
    def load_id(self) -> int:
        return self._load_id

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def sink(self) -> Optional[CaptureSink]:
        return self._sink

    def _load(self, html: str) -> None:
        self._doc = lxml.html.document_fromstring(html or "<html></html>")
        self._focused = None
        self._load_id += 1
        for callback in list(self._new_document_callbacks):
            try:
                callback()
            except Exception as e:
                logger.warning(f"New-document callback error: {e}")

    def _log(self, event: DispatchedEvent) -> None:
        self.events.append(event)

    def _wrap(self, element: Any) -> Optional[SnapshotElement]:
        if isinstance(element, etree._Element):
            return SnapshotElement(element, self)
        return None

    def _check_open(self) -> None:
        if self._closed:
            raise PageError("Page is closed")

    async def goto(self, url: str) -> None:
        self._check_open()
        if url not in self.routes:
            raise NavigationError(f"Failed to navigate to {url}: no such page", url=url)
        self._url = url
        self._load(self.routes[url])
        logger.debug(f"Loaded {url} (load {self._load_id})")
        if self._sink is not None:
            self._sink.on_url_change(url)

    def load_html(self, html: str, url: Optional[str] = None) -> None:
        """Replace the document, as a full page load would."""
        if url is not None:
            self._url = url
        self._load(html)

    async def query_selector(self, selector: str) -> Optional[IElement]:
        self._check_open()
        matches = self._doc.cssselect(selector)
        return self._wrap(matches[0]) if matches else None

    async def query_selector_all(self, selector: str) -> List[IElement]:
        self._check_open()
        return [SnapshotElement(el, self) for el in self._doc.cssselect(selector)]

    async def query_xpath(self, path: str) -> Optional[IElement]:
        self._check_open()
        result = self._doc.xpath(path)
        if isinstance(result, list):
            for item in result:
                if isinstance(item, etree._Element):
                    return SnapshotElement(item, self)
        return None

    async def active_element(self) -> Optional[IElement]:
        self._check_open()
        if self._focused is not None:
            return SnapshotElement(self._focused, self)
        body = self._doc.find("body")
        return SnapshotElement(body, self) if body is not None else None

    async def install_capture(self, sink: CaptureSink) -> None:
        self._check_open()
        self._sink = sink

    def on_new_document(self, callback: Callable[[], Any]) -> None:
        self._new_document_callbacks.append(callback)

    async def close(self) -> None:
        self._closed = True

    # =========================================================================
    # Simulated user input (drives the installed capture sink)
    # =========================================================================

    async def _require(self, selector: Union[str, SnapshotElement]) -> SnapshotElement:
        if isinstance(selector, SnapshotElement):
            return selector
        element = await self.query_selector(selector)
        if element is None:
            raise ElementNotFoundError(f"No element matches {selector}", selector=selector)
        return element

    async def user_click(self, selector: Union[str, SnapshotElement]) -> SnapshotElement:
        """Click as a user would: the sink sees the click, the element gets focus."""
        element = await self._require(selector)
        if self._sink is not None:
            self._sink.on_click(await element.snapshot())
        self._focused = element.raw
        return element

    async def user_input(self, selector: Union[str, SnapshotElement], text: str) -> SnapshotElement:
        """Set the element's value to ``text`` and report one input event."""
        element = await self._require(selector)
        self._focused = element.raw
        await element.clear()
        if text:
            if element.raw.tag == "input":
                element.raw.set("value", text)
            else:
                element.raw.text = text
        if self._sink is not None:
            self._sink.on_input(element.value, await element.is_editable())
        return element

    async def user_keydown(self, key: str) -> None:
        """Report a key press on the focused element."""
        target = await self.active_element()
        text = target.value if isinstance(target, SnapshotElement) else None
        editable = await target.is_editable() if target is not None else False
        if self._sink is not None:
            self._sink.on_keydown(key, text, editable)

    def user_set_url(self, url: str) -> None:
        """Change the URL without loading a document (history API)."""
        self._url = url
        if self._sink is not None:
            self._sink.on_url_change(url)
