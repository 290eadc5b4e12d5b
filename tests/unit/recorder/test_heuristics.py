"""
Tests for navigation heuristics.
"""

import pytest

from web_replay.recorder import (
    AfterKeyPressHeuristic,
    NavigationContext,
    SameChatThreadHeuristic,
    build_heuristics,
    host_matches,
)


class TestHostMatches:
    """Test host matching."""

    def test_exact_and_subdomain(self):
        assert host_matches("https://chatgpt.com/c/1", ["chatgpt.com"])
        assert host_matches("https://auth.openai.com/login", ["openai.com"])

    def test_other_host(self):
        assert not host_matches("https://notchatgpt.com/", ["chatgpt.com"])
        assert not host_matches(None, ["chatgpt.com"])


class TestSameChatThread:
    """Test the chat-thread heuristic."""

    @pytest.fixture
    def heuristic(self):
        return SameChatThreadHeuristic(["chatgpt.com"])

    def test_same_thread_suppressed(self, heuristic):
        context = NavigationContext(
            url="https://chatgpt.com/c/abc?model=x",
            last_url="https://chatgpt.com/c/abc?model=x",
            last_step_type="click",
        )
        assert heuristic.suppresses(context)

    def test_threadless_pages_suppressed(self, heuristic):
        context = NavigationContext(
            url="https://chatgpt.com/?temporary=true",
            last_url="https://chatgpt.com/",
            last_step_type="click",
        )
        assert heuristic.suppresses(context)

    def test_new_thread_recorded(self, heuristic):
        context = NavigationContext(
            url="https://chatgpt.com/c/def",
            last_url="https://chatgpt.com/c/abc",
            last_step_type="click",
        )
        assert not heuristic.suppresses(context)

    def test_other_site_recorded(self, heuristic):
        context = NavigationContext(
            url="https://example.com/b",
            last_url="https://example.com/a",
            last_step_type="click",
        )
        assert not heuristic.suppresses(context)

    def test_leaving_chat_recorded(self, heuristic):
        context = NavigationContext(
            url="https://example.com/",
            last_url="https://chatgpt.com/",
            last_step_type="click",
        )
        assert not heuristic.suppresses(context)


class TestAfterKeyPress:
    """Test the key-press heuristic."""

    def test_after_press_suppressed(self):
        context = NavigationContext(url="https://example.com/search?q=x", last_url="https://example.com/", last_step_type="press")
        assert AfterKeyPressHeuristic().suppresses(context)

    def test_after_click_recorded(self):
        context = NavigationContext(url="https://example.com/b", last_url="https://example.com/", last_step_type="click")
        assert not AfterKeyPressHeuristic().suppresses(context)

    def test_host_restriction(self):
        heuristic = AfterKeyPressHeuristic(hosts=["chatgpt.com"])
        context = NavigationContext(url="https://example.com/b", last_url="https://example.com/", last_step_type="press")
        assert not heuristic.suppresses(context)


class TestBuildHeuristics:
    """Test building heuristics by name."""

    def test_build(self):
        heuristics = build_heuristics(["same-chat-thread", "after-key-press"], ["chatgpt.com"])
        assert [h.name for h in heuristics] == ["same-chat-thread", "after-key-press"]
        assert heuristics[0].chat_hosts == ["chatgpt.com"]

    def test_unknown(self):
        with pytest.raises(ValueError):
            build_heuristics(["never-record"])
