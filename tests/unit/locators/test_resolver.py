"""
Tests for locator resolution against a snapshot page.
"""

import pytest

from web_replay.browsers import SnapshotPage
from web_replay.locators import (
    LOCATOR_MODELS,
    CssLocator,
    DataTestIdLocator,
    HrefLocator,
    IdLocator,
    LocatorGenerator,
    LocatorResolver,
    ResolvedTarget,
    RoleLocator,
    SemanticLocator,
    TextLocator,
    TitleLocator,
    XPathLocator,
    describe_locator,
)


@pytest.fixture
def resolver():
    return LocatorResolver()


class TestResolutionOrder:
    """Test ordered, first-success resolution."""

    @pytest.mark.asyncio
    async def test_test_id_wins(self, resolver, login_page):
        target = await resolver.resolve(login_page, [
            DataTestIdLocator(value="login-submit"),
            TextLocator(content="Sign in"),
        ])

        assert target.is_resolved
        assert target.strategy == "data-testid"
        assert target.selector == '[data-testid="login-submit"]'

    @pytest.mark.asyncio
    async def test_ambiguous_test_id_skipped(self, resolver):
        page = SnapshotPage(
            '<div><button data-testid="dup" id="a">A</button>'
            '<button data-testid="dup" id="b">B</button></div>'
        )

        target = await resolver.resolve(page, [
            DataTestIdLocator(value="dup"),
            IdLocator(value="b"),
        ])

        assert target.strategy == "id"
        assert target.selector == "#b"

    @pytest.mark.asyncio
    async def test_malformed_selector_skipped(self, resolver, login_page):
        """A failing locator only skips itself."""
        target = await resolver.resolve(login_page, [
            CssLocator(selector="button[[["),
            TextLocator(content="Sign in"),
        ])

        assert target.strategy == "text"
        assert await target.element.tag_name() == "button"

    @pytest.mark.asyncio
    async def test_no_match(self, resolver, login_page):
        target = await resolver.resolve(login_page, [
            DataTestIdLocator(value="missing"),
            TextLocator(content="Nowhere"),
        ])

        assert target == ResolvedTarget.no_match()
        assert not target.is_resolved
        assert target.strategy is None

    @pytest.mark.asyncio
    async def test_empty_list(self, resolver, login_page):
        target = await resolver.resolve(login_page, [])
        assert not target.is_resolved


class TestTextResolution:
    """Test exact trimmed text matching."""

    @pytest.mark.asyncio
    async def test_exact_match_only(self, resolver):
        page = SnapshotPage(
            "<div><button id='long'>Submit now</button>"
            "<button id='short'>  Submit  </button></div>"
        )

        target = await resolver.resolve(page, [TextLocator(content="Submit")])

        assert await target.element.get_attribute("id") == "short"


class TestAttributeResolution:
    """Test role, id, href, title and xpath strategies."""

    @pytest.mark.asyncio
    async def test_role_by_aria_label(self, resolver):
        page = SnapshotPage('<div role="button" aria-label="Close">X</div>')

        target = await resolver.resolve(page, [RoleLocator(role="button", name="Close")])

        assert target.selector == '[role="button"][aria-label="Close"]'

    @pytest.mark.asyncio
    async def test_role_by_text_scan(self, resolver):
        page = SnapshotPage('<div role="tab">General</div><div role="tab" id="s">Settings</div>')

        target = await resolver.resolve(page, [RoleLocator(role="tab", name="Settings")])

        assert await target.element.get_attribute("id") == "s"

    @pytest.mark.asyncio
    async def test_id(self, resolver, login_page):
        target = await resolver.resolve(login_page, [IdLocator(value="username")])
        assert target.selector == "#username"

    @pytest.mark.asyncio
    async def test_href_substring(self, resolver, login_page):
        target = await resolver.resolve(login_page, [HrefLocator(path="/docs/intro")])
        assert target.selector == 'a[href*="/docs/intro"]'

    @pytest.mark.asyncio
    async def test_title(self, resolver, login_page):
        target = await resolver.resolve(login_page, [TitleLocator(value="Documentation")])
        assert target.selector == '[title="Documentation"]'

    @pytest.mark.asyncio
    async def test_xpath(self, resolver, login_page):
        target = await resolver.resolve(login_page, [XPathLocator(path="/html/body/nav/a[2]")])
        assert await target.element.get_attribute("href") == "/"


class TestSemanticResolution:
    """Test semantic controls."""

    @pytest.mark.asyncio
    async def test_web_search_fixed_selector(self, resolver):
        page = SnapshotPage('<button aria-label="Search the web" id="ws">🌐</button>')

        target = await resolver.resolve(page, [
            SemanticLocator(type="web-search", description="Web search button"),
        ])

        assert target.strategy == "web-search"
        assert await target.element.get_attribute("id") == "ws"

    @pytest.mark.asyncio
    async def test_web_search_menu_item(self, resolver):
        page = SnapshotPage('<div role="menuitemcheckbox" id="m">Web search</div>')

        target = await resolver.resolve(page, [
            SemanticLocator(type="web-search", description="Web search button"),
        ])

        assert await target.element.get_attribute("id") == "m"

    @pytest.mark.asyncio
    async def test_composer_plus_skips_hidden_copies(self, resolver):
        page = SnapshotPage(
            '<div style="display: none"><button data-testid="composer-plus-btn" id="old">+</button></div>'
            '<div><button data-testid="composer-plus-btn" id="live">+</button></div>'
        )

        target = await resolver.resolve(page, [
            SemanticLocator(type="composer-plus", description="Composer add-attachment button"),
        ])

        assert await target.element.get_attribute("id") == "live"


class TestRoundTrip:
    """Test that a captured element is found again on the same page."""

    @pytest.mark.asyncio
    async def test_generated_locators_resolve(self, resolver, login_page):
        element = await login_page.query_selector("nav a")
        locators = LocatorGenerator().generate(await element.snapshot())

        target = await resolver.resolve(login_page, locators)

        assert target.strategy == "href"


class TestExhaustiveness:
    """Every locator type has a resolution handler and a description."""

    def test_all_types_handled(self, resolver):
        assert set(resolver.supported_types) == set(LOCATOR_MODELS)

    def test_all_types_described(self):
        samples = [
            RoleLocator(role="button", name="Go"),
            DataTestIdLocator(value="go"),
            IdLocator(value="go"),
            HrefLocator(path="/go"),
            TitleLocator(value="Go"),
            TextLocator(content="Go"),
            SemanticLocator(type="web-search", description="Web search button"),
            CssLocator(selector="button"),
            XPathLocator(path="//button"),
        ]
        assert {type(sample) for sample in samples} == set(LOCATOR_MODELS)
        for sample in samples:
            assert describe_locator(sample)
