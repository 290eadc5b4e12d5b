"""
Interfaces module - Abstract contracts between the core and page backends.
"""

from web_replay.interfaces.browser import (
    PathSegment,
    ElementSnapshot,
    CaptureSink,
    IElement,
    IPage,
)

__all__ = [
    "PathSegment",
    "ElementSnapshot",
    "CaptureSink",
    "IElement",
    "IPage",
]
