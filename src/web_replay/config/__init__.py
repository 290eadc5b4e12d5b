"""
Configuration for capture, replay, messaging, the browser and logging.

Every tunable delay and list (typing debounce, navigation settle time,
typing delays, retry and resolution timeouts) is a field here, passed to
components explicitly through their constructors.

Environment Variables:
    WEB_REPLAY_CONFIG=path/to/web-replay.yaml
    WEB_REPLAY__REPLAY__NAVIGATION_SETTLE_MS=5000
    WEB_REPLAY__CAPTURE__TYPING_DEBOUNCE_MS=800
    WEB_REPLAY__BROWSER__HEADLESS=true
"""

from typing import Optional

from web_replay.config.settings import (
    Settings,
    BrowserSettings,
    CaptureSettings,
    ReplaySettings,
    MessagingSettings,
    LoggingSettings,
)
from web_replay.config.loader import ConfigLoader, load_config, read_config_file

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Settings loaded on first use and shared afterwards."""
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def reset_settings() -> None:
    """Drop the shared settings so the next get_settings() reloads them."""
    global _settings
    _settings = None


__all__ = [
    "Settings",
    "BrowserSettings",
    "CaptureSettings",
    "ReplaySettings",
    "MessagingSettings",
    "LoggingSettings",
    "ConfigLoader",
    "load_config",
    "read_config_file",
    "get_settings",
    "reset_settings",
]
