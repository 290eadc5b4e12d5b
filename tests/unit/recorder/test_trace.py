"""
Tests for the trace file format and the trace store.
"""

import json
from datetime import datetime

import pytest

from web_replay.exceptions import InvalidTraceError, RecordingStateError
from web_replay.locators import DataTestIdLocator
from web_replay.recorder import (
    ClickStep,
    ClickTarget,
    NavigateStep,
    PressStep,
    Trace,
    TraceStore,
    TypeStep,
    load_trace,
    save_trace,
    trace_filename,
)


@pytest.fixture
def trace():
    return Trace(version=1, steps=[
        NavigateStep(t=0, url="https://example.com/"),
        ClickStep(t=812, target=ClickTarget(locators=[DataTestIdLocator(value="go")])),
        TypeStep(t=2410, text="héllo"),
        PressStep(t=2455, key="Enter"),
    ])


class TestTraceFile:
    """Test reading and writing trace files."""

    def test_save_and_load(self, trace, tmp_path):
        path = save_trace(trace, tmp_path / "out" / "trace.json")

        assert path == tmp_path / "out" / "trace.json"
        assert load_trace(path) == trace

    def test_pretty_printed(self, trace, tmp_path):
        path = save_trace(trace, tmp_path / "trace.json")
        content = path.read_text(encoding="utf-8")

        assert content.startswith('{\n  "version": 1,')
        assert "héllo" in content

    def test_directory_gets_timestamped_name(self, trace, tmp_path):
        path = save_trace(trace, tmp_path)

        assert path.parent == tmp_path
        assert path.name.startswith("trace-")
        assert path.suffix == ".json"

    def test_trace_filename(self):
        assert trace_filename(datetime(2024, 5, 1, 13, 4, 9)) == "trace-2024-05-01T13-04-09.json"

    def test_missing_keys(self):
        with pytest.raises(InvalidTraceError) as exc_info:
            Trace.from_dict({"steps": []})
        assert "version" in exc_info.value.message

    def test_not_an_object(self):
        with pytest.raises(InvalidTraceError):
            Trace.from_dict([1, 2, 3])

    def test_malformed_step_rejects_whole_trace(self):
        data = {"version": 1, "steps": [
            {"t": 0, "type": "navigate", "url": "https://example.com/"},
            {"t": 10, "type": "click"},
        ]}

        with pytest.raises(InvalidTraceError) as exc_info:
            Trace.from_dict(data)

        assert any(error.startswith("steps.1") for error in exc_info.value.errors)

    def test_not_json(self, tmp_path):
        path = tmp_path / "trace.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(InvalidTraceError) as exc_info:
            load_trace(path)
        assert exc_info.value.source == str(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidTraceError):
            load_trace(tmp_path / "nope.json")

    def test_extra_top_level_keys_ignored(self, trace):
        data = trace.to_dict()
        data["exportedBy"] = "someone"
        assert Trace.from_dict(data) == trace

    def test_wire_dict(self, trace):
        data = json.loads(trace.to_json())
        assert data["steps"][3] == {"t": 2455, "type": "press", "key": "Enter"}


class TestTraceStore:
    """Test the orchestrator's step log."""

    def test_lifecycle(self):
        store = TraceStore()
        store.begin()
        store.mark_started(1700000000000)
        store.append(NavigateStep(t=0, url="https://example.com/"))
        store.append(PressStep(t=5, key="Enter"))
        store.finish()

        assert not store.is_recording
        assert len(store) == 2
        assert store.start_time == 1700000000000
        assert store.to_trace().version == 1

    def test_append_requires_recording(self):
        store = TraceStore()
        with pytest.raises(RecordingStateError):
            store.append(PressStep(t=0, key="Enter"))

    def test_frozen_after_finish(self):
        store = TraceStore()
        store.begin()
        store.finish()
        with pytest.raises(RecordingStateError):
            store.append(PressStep(t=0, key="Enter"))

    def test_double_begin(self):
        store = TraceStore()
        store.begin()
        with pytest.raises(RecordingStateError):
            store.begin()

    def test_finish_adopts_authoritative_steps(self):
        store = TraceStore()
        store.begin()
        store.append(NavigateStep(t=0, url="https://example.com/"))
        final = [NavigateStep(t=0, url="https://example.com/"), PressStep(t=9, key="Tab")]

        store.finish(final)

        assert store.steps == tuple(final)

    def test_begin_discards_previous(self, trace):
        store = TraceStore()
        store.load(trace)
        store.begin()
        assert len(store) == 0

    def test_load_while_recording(self, trace):
        store = TraceStore()
        store.begin()
        with pytest.raises(RecordingStateError):
            store.load(trace)
