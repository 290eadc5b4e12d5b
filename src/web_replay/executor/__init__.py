"""
Executor Module - Page-side event capture and synthetic input.
"""

from web_replay.executor.executor import PageExecutor, REF_PREFIX
from web_replay.executor.registry import ExecutorRegistry
from web_replay.executor.human_typing import HumanTyper, DEFAULT_INPUT_SELECTORS

__all__ = [
    "PageExecutor",
    "REF_PREFIX",
    "ExecutorRegistry",
    "HumanTyper",
    "DEFAULT_INPUT_SELECTORS",
]
