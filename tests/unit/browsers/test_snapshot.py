"""
Tests for the static-HTML page.
"""

from unittest.mock import MagicMock

import pytest

from web_replay.browsers import SnapshotPage
from web_replay.exceptions import ElementNotFoundError, NavigationError, PageError


class TestQueries:
    """Test CSS and XPath queries."""

    @pytest.mark.asyncio
    async def test_query_selector(self, login_page):
        element = await login_page.query_selector('[data-testid="login-submit"]')

        assert await element.tag_name() == "button"
        assert (await element.text_content()).strip() == "Sign in"
        assert await element.get_attribute("class") == "btn btn-primary"

    @pytest.mark.asyncio
    async def test_query_selector_all(self, login_page):
        links = await login_page.query_selector_all("nav a")
        assert [await link.get_attribute("href") for link in links] == ["/docs/intro", "/"]

    @pytest.mark.asyncio
    async def test_query_xpath(self, login_page):
        element = await login_page.query_xpath("/html/body/nav/a[2]")
        assert await element.get_attribute("href") == "/"

    @pytest.mark.asyncio
    async def test_xpath_non_element_result(self, login_page):
        assert await login_page.query_xpath("count(//a)") is None

    @pytest.mark.asyncio
    async def test_no_match(self, login_page):
        assert await login_page.query_selector("#nope") is None
        assert await login_page.query_xpath("//table") is None


class TestElementState:
    """Test rendering and editability."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("html,rendered", [
        ('<button id="x">Go</button>', True),
        ('<button id="x" hidden>Go</button>', False),
        ('<div style="display: none"><button id="x">Go</button></div>', False),
        ('<button id="x" style="visibility:hidden">Go</button>', False),
        ('<input type="hidden" id="x">', False),
    ])
    async def test_is_rendered(self, html, rendered):
        page = SnapshotPage(html)
        element = await page.query_selector("#x")
        assert await element.is_rendered() is rendered

    @pytest.mark.asyncio
    @pytest.mark.parametrize("html,editable", [
        ('<input id="x">', True),
        ('<textarea id="x"></textarea>', True),
        ('<div id="x" contenteditable="true"></div>', True),
        ('<div id="x"></div>', False),
    ])
    async def test_is_editable(self, html, editable):
        page = SnapshotPage(html)
        element = await page.query_selector("#x")
        assert await element.is_editable() is editable

    @pytest.mark.asyncio
    async def test_focus_and_active_element(self, login_page):
        assert await login_page.active_element() == await login_page.query_selector("body")

        element = await login_page.query_selector("#password")
        await element.focus()

        assert await login_page.active_element() == element


class TestSnapshot:
    """Test element snapshots."""

    @pytest.mark.asyncio
    async def test_path_positions(self, login_page):
        link = await login_page.query_xpath("/html/body/nav/a[2]")

        snapshot = await link.snapshot()

        assert [segment.tag for segment in snapshot.path] == ["a", "nav", "body", "html"]
        assert snapshot.path[0].position == 2
        assert snapshot.path[0].same_tag_siblings == 1
        assert not snapshot.truncated

    @pytest.mark.asyncio
    async def test_href_is_absolute(self, login_page):
        link = await login_page.query_selector('a[title="Documentation"]')
        snapshot = await link.snapshot()
        assert snapshot.href == "https://example.com/docs/intro"

    @pytest.mark.asyncio
    async def test_truncated(self, login_page):
        button = await login_page.query_selector("button")
        snapshot = await button.snapshot(max_depth=2)

        assert [segment.tag for segment in snapshot.path] == ["button", "form"]
        assert snapshot.truncated


class TestDocuments:
    """Test navigation and document loads."""

    @pytest.mark.asyncio
    async def test_goto_route(self, login_html):
        page = SnapshotPage(routes={"https://example.com/": login_html})
        callback = MagicMock()
        page.on_new_document(callback)

        await page.goto("https://example.com/")

        assert page.url == "https://example.com/"
        assert page.load_id == 2
        callback.assert_called_once_with()
        assert await page.query_selector("#username") is not None

    @pytest.mark.asyncio
    async def test_goto_unknown(self):
        page = SnapshotPage()
        with pytest.raises(NavigationError) as exc_info:
            await page.goto("https://example.com/missing")
        assert exc_info.value.url == "https://example.com/missing"

    @pytest.mark.asyncio
    async def test_load_html_resets_focus(self, login_page):
        await (await login_page.query_selector("#username")).focus()

        login_page.load_html("<p>next</p>")

        active = await login_page.active_element()
        assert await active.tag_name() == "body"
        assert login_page.load_id == 2

    def test_failing_callback_absorbed(self, login_page):
        login_page.on_new_document(MagicMock(side_effect=RuntimeError("boom")))
        login_page.load_html("<p>next</p>")
        assert login_page.load_id == 2

    @pytest.mark.asyncio
    async def test_closed_page(self, login_page):
        await login_page.close()

        assert login_page.is_closed
        with pytest.raises(PageError):
            await login_page.query_selector("button")

    def test_from_file(self, tmp_path, login_html):
        path = tmp_path / "login.html"
        path.write_text(login_html, encoding="utf-8")

        page = SnapshotPage.from_file(str(path), url="https://example.com/login")

        assert page.url == "https://example.com/login"


class TestSimulatedUser:
    """Test user input driving the capture sink."""

    @pytest.fixture
    def sink(self):
        return MagicMock()

    @pytest.mark.asyncio
    async def test_click_reports_snapshot_and_focuses(self, login_page, sink):
        await login_page.install_capture(sink)

        element = await login_page.user_click("#username")

        snapshot = sink.on_click.call_args.args[0]
        assert snapshot.attributes["id"] == "username"
        assert await login_page.active_element() == element

    @pytest.mark.asyncio
    async def test_input_and_keydown(self, login_page, sink):
        await login_page.install_capture(sink)

        await login_page.user_input("#username", "bob")
        await login_page.user_keydown("Enter")

        sink.on_input.assert_called_once_with("bob", True)
        sink.on_keydown.assert_called_once_with("Enter", "bob", True)

    @pytest.mark.asyncio
    async def test_keydown_without_focus(self, login_page, sink):
        await login_page.install_capture(sink)
        await login_page.user_keydown("Escape")
        sink.on_keydown.assert_called_once_with("Escape", None, False)

    @pytest.mark.asyncio
    async def test_set_url(self, login_page, sink):
        await login_page.install_capture(sink)
        login_page.user_set_url("https://example.com/c/1")

        assert login_page.url == "https://example.com/c/1"
        sink.on_url_change.assert_called_once_with("https://example.com/c/1")

    @pytest.mark.asyncio
    async def test_missing_target(self, login_page):
        with pytest.raises(ElementNotFoundError):
            await login_page.user_click("#nope")
