"""
Tests for the executor registry.
"""

import asyncio

import pytest

from web_replay.browsers import SnapshotPage
from web_replay.executor import ExecutorRegistry
from web_replay.locators import LocatorGenerator
from web_replay.messaging import RecordStep
from web_replay.recorder import StepRecorder


@pytest.fixture
def pushes():
    return []


@pytest.fixture
def registry(pushes, instant_typer):
    recorder = StepRecorder(LocatorGenerator(), debounce_ms=0)
    return ExecutorRegistry(recorder, push=pushes.append, typer=instant_typer)


class TestEnsure:
    """Test executor injection."""

    @pytest.mark.asyncio
    async def test_idempotent_per_load(self, registry, login_page):
        first = await registry.ensure(login_page)
        second = await registry.ensure(login_page)

        assert first is second
        assert first.is_active
        assert login_page.sink is first

    @pytest.mark.asyncio
    async def test_new_load_new_executor(self, registry, login_page):
        first = await registry.ensure(login_page)
        login_page.load_html("<p>next</p>")

        assert registry.current(login_page) is None

        second = await registry.ensure(login_page)
        assert second is not first
        assert second.load_id == first.load_id + 1
        assert second.recorder is first.recorder

    @pytest.mark.asyncio
    async def test_separate_pages(self, registry, login_html):
        one = SnapshotPage(login_html)
        two = SnapshotPage(login_html)

        assert await registry.ensure(one) is not await registry.ensure(two)

    @pytest.mark.asyncio
    async def test_forget(self, registry, login_page):
        await registry.ensure(login_page)
        registry.forget(login_page)
        assert registry.current(login_page) is None


class TestRecordingAcrossLoads:
    """Test capture continuing through full page loads."""

    @pytest.mark.asyncio
    async def test_reinjected_while_recording(self, registry, pushes, login_html):
        page = SnapshotPage(
            login_html,
            url="https://example.com/login",
            routes={"https://example.com/docs/intro": login_html},
        )
        first = await registry.ensure(page)
        await first.deliver({"type": "START_RECORDING"})

        await page.goto("https://example.com/docs/intro")
        await asyncio.sleep(0)

        second = registry.current(page)
        assert second is not None and second is not first
        assert page.sink is second

        await page.user_click('[data-testid="login-submit"]')

        steps = registry.recorder.steps
        assert [step.type for step in steps] == ["navigate", "navigate", "click"]

        recorded = [push.step for push in pushes if isinstance(push, RecordStep)]
        assert recorded == list(steps)

    @pytest.mark.asyncio
    async def test_not_reinjected_when_idle(self, registry, login_html):
        page = SnapshotPage(login_html, routes={"https://example.com/": login_html})
        await registry.ensure(page)

        await page.goto("https://example.com/")
        await asyncio.sleep(0)

        assert registry.current(page) is None
