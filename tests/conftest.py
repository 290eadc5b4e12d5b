"""
Pytest configuration and fixtures.
"""

import pytest


LOGIN_HTML = """
<html>
<head><title>Login</title></head>
<body>
  <form id="login-form">
    <input type="text" id="username" name="username" placeholder="Username">
    <input type="password" id="password" name="password">
    <button type="submit" data-testid="login-submit" class="btn btn-primary">Sign in</button>
  </form>
  <nav>
    <a href="/docs/intro" title="Documentation">Docs</a>
    <a href="/">Home</a>
  </nav>
</body>
</html>
"""


@pytest.fixture
def settings():
    """Provide settings with every delay switched off."""
    from web_replay.config import (
        Settings,
        BrowserSettings,
        CaptureSettings,
        ReplaySettings,
        MessagingSettings,
    )

    return Settings(
        browser=BrowserSettings(headless=True),
        capture=CaptureSettings(typing_debounce_ms=0),
        replay=ReplaySettings(
            navigation_settle_ms=0,
            typing_base_delay_ms=0,
            typing_space_delay_ms=0,
            typing_punctuation_delay_ms=0,
            typing_newline_delay_ms=0,
            typing_jitter_ms=0,
        ),
        messaging=MessagingSettings(retry_delay_ms=0, resolve_timeout_ms=1000),
    )


@pytest.fixture
def login_html():
    return LOGIN_HTML


@pytest.fixture
def login_page():
    """Provide a snapshot page holding a login form."""
    from web_replay.browsers import SnapshotPage

    return SnapshotPage(LOGIN_HTML, url="https://example.com/login")


@pytest.fixture
def instant_typer():
    """Provide a typer that does not wait between characters."""
    from web_replay.executor import HumanTyper

    async def no_sleep(seconds):
        return None

    return HumanTyper(
        base_delay_ms=0,
        space_delay_ms=0,
        punctuation_delay_ms=0,
        newline_delay_ms=0,
        jitter_ms=0,
        sleep=no_sleep,
    )


@pytest.fixture
def snapshot_factory():
    """Build ElementSnapshots with sensible defaults."""
    from web_replay.interfaces.browser import ElementSnapshot, PathSegment

    def make(tag="button", attributes=None, text="", href=None, path=None, truncated=False):
        if path is None:
            path = [
                PathSegment(tag=tag),
                PathSegment(tag="body"),
                PathSegment(tag="html"),
            ]
        return ElementSnapshot(
            tag_name=tag,
            attributes=dict(attributes or {}),
            text_content=text,
            href=href,
            path=path,
            truncated=truncated,
        )

    return make
