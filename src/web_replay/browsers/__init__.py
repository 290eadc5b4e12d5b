"""
Browsers module - Page implementations.
"""

from web_replay.browsers.playwright_browser import (
    PlaywrightBrowser,
    PlaywrightElement,
    PlaywrightPage,
)
from web_replay.browsers.snapshot import (
    DispatchedEvent,
    SnapshotElement,
    SnapshotPage,
)

__all__ = [
    "PlaywrightBrowser",
    "PlaywrightElement",
    "PlaywrightPage",
    "DispatchedEvent",
    "SnapshotElement",
    "SnapshotPage",
]
