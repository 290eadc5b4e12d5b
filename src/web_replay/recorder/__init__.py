"""
Recorder Module - Capture page interactions as a replayable trace.

This module provides the step model, the trace file format, the
orchestrator-side trace store and the capture engine that turns raw page
events into steps.
"""

from web_replay.recorder.steps import (
    Step,
    StepType,
    NavigateStep,
    ClickStep,
    ClickTarget,
    TypeStep,
    PressStep,
    STEP_MODELS,
    parse_step,
    dump_steps,
    describe_step,
    display_locators,
    page_name,
)
from web_replay.recorder.trace import Trace, TRACE_VERSION, load_trace, save_trace, trace_filename
from web_replay.recorder.store import TraceStore
from web_replay.recorder.heuristics import (
    NavigationContext,
    NavigationHeuristic,
    SameChatThreadHeuristic,
    AfterKeyPressHeuristic,
    build_heuristics,
    host_matches,
)
from web_replay.recorder.recorder import StepRecorder

__all__ = [
    "Step",
    "StepType",
    "NavigateStep",
    "ClickStep",
    "ClickTarget",
    "TypeStep",
    "PressStep",
    "STEP_MODELS",
    "parse_step",
    "dump_steps",
    "describe_step",
    "display_locators",
    "page_name",
    "Trace",
    "TRACE_VERSION",
    "load_trace",
    "save_trace",
    "trace_filename",
    "TraceStore",
    "NavigationContext",
    "NavigationHeuristic",
    "SameChatThreadHeuristic",
    "AfterKeyPressHeuristic",
    "build_heuristics",
    "host_matches",
    "StepRecorder",
]
