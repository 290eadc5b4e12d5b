"""
Playwright Browser - Live IPage/IElement implementation using Playwright.

Capture works through an exposed function plus an init script: the script
is re-run in every new document, reports click / input / keydown events
(clicks with an element snapshot taken in the page), and the exposed
function hands them to the installed CaptureSink. URL changes are observed
through main-frame ``framenavigated``.
"""

import json
from typing import Any, Callable, Dict, List, Optional
import logging

from web_replay.exceptions import (
    BrowserError,
    BrowserLaunchError,
    NavigationError,
    PageError,
)
from web_replay.interfaces.browser import (
    CaptureSink,
    ElementSnapshot,
    IElement,
    IPage,
)

logger = logging.getLogger(__name__)

REPORT_FUNCTION = "__webReplayReport"
CAPTURE_MAX_DEPTH = 8

SNAPSHOT_JS = """
(el, maxDepth) => {
    const attributes = {};
    for (const attr of el.attributes) {
        attributes[attr.name] = attr.value;
    }
    const path = [];
    let node = el;
    while (node && path.length < maxDepth) {
        const parent = node.parentElement;
        const siblings = parent
            ? Array.from(parent.children).filter(s => s.tagName === node.tagName)
            : [node];
        path.push({
            tag: node.tagName.toLowerCase(),
            position: siblings.indexOf(node) + 1,
            same_tag_siblings: siblings.length - 1,
        });
        node = parent;
    }
    return {
        tag_name: el.tagName.toLowerCase(),
        attributes,
        text_content: el.textContent || '',
        href: el.tagName === 'A' ? (el.href || null) : null,
        path,
        truncated: !!node,
    };
}
"""

CAPTURE_JS = """
(() => {
    if (window.__webReplayCapture) return;
    window.__webReplayCapture = true;

    const snapshot = %(snapshot)s;
    const isEditable = (el) => !!el && (
        el.tagName === 'INPUT' || el.tagName === 'TEXTAREA' || el.contentEditable === 'true'
    );
    const valueOf = (el) => el ? (el.value || el.textContent || el.innerText || '') : null;
    const report = (payload) => {
        const fn = window.%(report)s;
        if (fn) fn(JSON.stringify(payload)).catch(() => {});
    };

    document.addEventListener('click', (event) => {
        if (!(event.target instanceof Element)) return;
        report({kind: 'click', snapshot: snapshot(event.target, %(depth)d)});
    }, false);

    document.addEventListener('input', (event) => {
        report({kind: 'input', text: valueOf(event.target), editable: isEditable(event.target)});
    }, false);

    document.addEventListener('keydown', (event) => {
        report({
            kind: 'keydown',
            key: event.key,
            text: valueOf(event.target),
            editable: isEditable(event.target),
        });
    }, false);
})();
""" % {"snapshot": SNAPSHOT_JS.strip(), "report": REPORT_FUNCTION, "depth": CAPTURE_MAX_DEPTH}

RENDERED_JS = """
el => {
    const rect = el.getBoundingClientRect();
    return (rect.width > 0 && rect.height > 0) || el.offsetParent !== null;
}
"""

EDITABLE_JS = """
el => el.tagName === 'INPUT' || el.tagName === 'TEXTAREA' || el.contentEditable === 'true'
"""

CLEAR_JS = """
el => {
    if (el.tagName === 'INPUT' || el.tagName === 'TEXTAREA') {
        el.value = '';
    } else {
        el.textContent = '';
    }
}
"""

APPEND_JS = """
(el, text) => {
    if (el.tagName === 'INPUT' || el.tagName === 'TEXTAREA') {
        el.value += text;
    } else {
        el.textContent += text;
    }
    el.dispatchEvent(new Event('input', { bubbles: true }));
}
"""

ACTIVE_ELEMENT_JS = "() => document.activeElement"


class PlaywrightElement(IElement):
    """
    Playwright implementation of IElement.

    Wraps a Playwright ElementHandle; all DOM work is done in the page.
    """

    def __init__(self, element: Any):
        """
        Initialize the element wrapper.

        Args:
            element: Playwright ElementHandle
        """
        self._element = element

    async def tag_name(self) -> str:
        return await self._element.evaluate("el => el.tagName.toLowerCase()")

    async def get_attribute(self, name: str) -> Optional[str]:
        """Get an attribute value."""
        return await self._element.get_attribute(name)

    async def text_content(self) -> Optional[str]:
        """Get text content."""
        return await self._element.text_content()

    async def is_rendered(self) -> bool:
        return bool(await self._element.evaluate(RENDERED_JS))

    async def is_editable(self) -> bool:
        return bool(await self._element.evaluate(EDITABLE_JS))

    async def focus(self) -> None:
        await self._element.focus()

    async def clear(self) -> None:
        await self._element.evaluate(CLEAR_JS)

    async def append_text(self, char: str) -> None:
        await self._element.evaluate(APPEND_JS, char)

    async def click(self) -> None:
        """Native activation, without Playwright's pointer simulation."""
        await self._element.evaluate("el => el.click()")

    async def dispatch_event(self, event_type: str, init: Optional[Dict[str, Any]] = None) -> None:
        await self._element.dispatch_event(event_type, init or {})

    async def snapshot(self, max_depth: int = CAPTURE_MAX_DEPTH) -> ElementSnapshot:
        data = await self._element.evaluate(SNAPSHOT_JS, max_depth)
        return ElementSnapshot.from_dict(data)


class PlaywrightPage(IPage):
    """
    Playwright implementation of IPage.

    Wraps a Playwright Page for navigation, queries and event capture.
    ``load_id`` advances on every main-document ``domcontentloaded``.
    """

    def __init__(self, page: Any):
        """
        Initialize the page wrapper.

        Args:
            page: Playwright Page object
        """
        self._page = page
        self._load_id = 1
        self._sink: Optional[CaptureSink] = None
        self._capture_installed = False
        self._new_document_callbacks: List[Callable[[], Any]] = []

        page.on("domcontentloaded", self._on_dom_content_loaded)

    @property
    def url(self) -> str:
        """Get current URL."""
        return self._page.url

    @property
    def load_id(self) -> int:
        return self._load_id

    @property
    def is_closed(self) -> bool:
        return self._page.is_closed()

    async def goto(self, url: str) -> None:
        """Navigate to URL."""
        try:
            await self._page.goto(url)
        except Exception as e:
            raise NavigationError(f"Failed to navigate to {url}: {e}", url=url)

    async def query_selector(self, selector: str) -> Optional[IElement]:
        """Find first matching element."""
        element = await self._page.query_selector(selector)
        if element:
            return PlaywrightElement(element)
        return None

    async def query_selector_all(self, selector: str) -> List[IElement]:
        """Find all matching elements."""
        elements = await self._page.query_selector_all(selector)
        return [PlaywrightElement(el) for el in elements]

    async def query_xpath(self, path: str) -> Optional[IElement]:
        element = await self._page.query_selector(f"xpath={path}")
        if element:
            return PlaywrightElement(element)
        return None

    async def active_element(self) -> Optional[IElement]:
        handle = await self._page.evaluate_handle(ACTIVE_ELEMENT_JS)
        element = handle.as_element()
        if element is None:
            await handle.dispose()
            return None
        return PlaywrightElement(element)

    async def install_capture(self, sink: CaptureSink) -> None:
        """Route page events to ``sink``; the page-side script is installed once."""
        self._sink = sink
        if self._capture_installed:
            return

        try:
            await self._page.expose_function(REPORT_FUNCTION, self._on_report)
            await self._page.add_init_script(CAPTURE_JS)
            await self._page.evaluate(CAPTURE_JS)
        except Exception as e:
            raise PageError(f"Failed to install capture script: {e}")

        self._page.on("framenavigated", self._on_frame_navigated)
        self._capture_installed = True
        logger.debug("Capture script installed")

    def on_new_document(self, callback: Callable[[], Any]) -> None:
        self._new_document_callbacks.append(callback)

    async def close(self) -> None:
        """Close page."""
        await self._page.close()

    def _on_dom_content_loaded(self, page: Any) -> None:
        self._load_id += 1
        logger.debug(f"New document loaded (load {self._load_id})")
        for callback in list(self._new_document_callbacks):
            try:
                callback()
            except Exception as e:
                logger.warning(f"New-document callback error: {e}")

    def _on_frame_navigated(self, frame: Any) -> None:
        if frame != self._page.main_frame or self._sink is None:
            return
        if frame.url and frame.url != "about:blank":
            self._sink.on_url_change(frame.url)

    def _on_report(self, payload: str) -> None:
        """Handle an event reported by the capture script."""
        if self._sink is None:
            return

        try:
            event = json.loads(payload)
            kind = event.get("kind")

            if kind == "click":
                self._sink.on_click(ElementSnapshot.from_dict(event.get("snapshot") or {}))
            elif kind == "input":
                self._sink.on_input(event.get("text") or "", bool(event.get("editable")))
            elif kind == "keydown":
                self._sink.on_keydown(event.get("key") or "", event.get("text"), bool(event.get("editable")))
            else:
                logger.debug(f"Ignoring page event: {kind}")

        except Exception as e:
            logger.warning(f"Error handling page event: {e}")


class PlaywrightBrowser:
    """
    Launches a browser and opens pages.

    Example:
        >>> browser = PlaywrightBrowser()
        >>> await browser.launch(headless=False)
        >>> page = await browser.new_page()
        >>> await page.goto("https://example.com")
        >>> await browser.close()
    """

    def __init__(self):
        """Initialize the browser (not launched yet)."""
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None

    @property
    def is_connected(self) -> bool:
        """Check if browser is connected."""
        return self._browser is not None and self._browser.is_connected()

    async def launch(
        self,
        headless: bool = False,
        browser_type: str = "chromium",
        **options: Any,
    ) -> None:
        """
        Launch the browser.

        Args:
            headless: Whether to run headless
            browser_type: chromium, firefox or webkit
            **options: Additional Playwright launch options (channel, ...)
        """
        try:
            from playwright.async_api import async_playwright

            self._playwright = await async_playwright().start()

            launchers = {
                "chromium": self._playwright.chromium,
                "firefox": self._playwright.firefox,
                "webkit": self._playwright.webkit,
            }
            launcher = launchers.get(browser_type, self._playwright.chromium)

            self._browser = await launcher.launch(headless=headless, **options)
            logger.info(f"Launched {browser_type} browser (headless={headless})")

        except Exception as e:
            raise BrowserLaunchError(f"Failed to launch browser: {e}")

    async def new_page(
        self,
        viewport_width: int = 1280,
        viewport_height: int = 720,
        timeout_ms: Optional[int] = None,
    ) -> PlaywrightPage:
        """
        Create a new page.

        Args:
            viewport_width: Viewport width in pixels
            viewport_height: Viewport height in pixels
            timeout_ms: Default timeout for page operations

        Returns:
            New page instance
        """
        if not self._browser:
            raise BrowserError("Browser not launched. Call launch() first.")

        if not self._context:
            self._context = await self._browser.new_context(
                viewport={"width": viewport_width, "height": viewport_height},
            )

        page = await self._context.new_page()
        if timeout_ms:
            page.set_default_timeout(timeout_ms)
        return PlaywrightPage(page)

    async def close(self) -> None:
        """Close the browser and cleanup."""
        if self._context:
            await self._context.close()
            self._context = None

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.info("Browser closed")
