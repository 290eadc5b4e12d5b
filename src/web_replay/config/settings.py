"""
Settings - Pydantic models for every tunable of capture, replay and messaging.

Each section maps onto the constructor parameters of the components that
use it; no component reads these values on its own.

Example:
    >>> from web_replay.config import load_config
    >>> load_config().replay.navigation_settle_ms
    3000
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BrowserSettings(BaseModel):
    """
    Browser launch settings.
    
    Attributes:
        headless: Run browser in headless mode
        browser_type: Playwright browser type
        channel: Optional branded channel (chrome, msedge)
        timeout_ms: Default timeout for browser operations
        viewport_width: Browser viewport width in pixels
        viewport_height: Browser viewport height in pixels
    """
    headless: bool = False
    browser_type: Literal["chromium", "firefox", "webkit"] = "chromium"
    channel: Optional[str] = None
    timeout_ms: int = Field(default=30000, ge=1000, le=300000)
    viewport_width: int = Field(default=1280, ge=320, le=3840)
    viewport_height: int = Field(default=720, ge=240, le=2160)


class CaptureSettings(BaseModel):
    """
    Step capture settings.
    
    Attributes:
        typing_debounce_ms: Idle time before a typed-input burst becomes a step
        special_keys: Keys recorded as press steps
        max_text_locator_length: Text locators are only emitted below this length
        xpath_max_depth: Ancestors walked when building a positional XPath
        max_css_classes: Class names kept in a generated CSS selector
        navigation_heuristics: Named heuristics that may suppress navigate steps
        chat_hosts: Hosts the chat-thread heuristic applies to
        semantic_locators: Semantic locator kinds the generator may emit
    """
    typing_debounce_ms: int = Field(default=1000, ge=0, le=60000)
    special_keys: List[str] = Field(default_factory=lambda: [
        "Enter", "Tab", "Escape", "ArrowUp", "ArrowDown", "ArrowLeft", "ArrowRight",
    ])
    max_text_locator_length: int = Field(default=100, ge=1)
    xpath_max_depth: int = Field(default=5, ge=1, le=50)
    max_css_classes: int = Field(default=3, ge=0, le=10)
    navigation_heuristics: List[str] = Field(
        default_factory=lambda: ["same-chat-thread", "after-key-press"]
    )
    chat_hosts: List[str] = Field(default_factory=lambda: ["chatgpt.com", "openai.com"])
    semantic_locators: List[str] = Field(
        default_factory=lambda: ["web-search", "composer-plus"]
    )


class ReplaySettings(BaseModel):
    """
    Replay timing settings.
    
    Attributes:
        navigation_settle_ms: Fixed wait after a navigate step
        typing_base_delay_ms: Delay after an ordinary character
        typing_space_delay_ms: Delay after a space
        typing_punctuation_delay_ms: Delay after . , ! ?
        typing_newline_delay_ms: Delay after a newline
        typing_jitter_ms: Upper bound of random jitter added to every delay
        input_selectors: Fallback editable targets when nothing is focused
    """
    navigation_settle_ms: int = Field(default=3000, ge=0, le=120000)
    typing_base_delay_ms: int = Field(default=50, ge=0)
    typing_space_delay_ms: int = Field(default=100, ge=0)
    typing_punctuation_delay_ms: int = Field(default=200, ge=0)
    typing_newline_delay_ms: int = Field(default=150, ge=0)
    typing_jitter_ms: int = Field(default=30, ge=0)
    input_selectors: List[str] = Field(default_factory=lambda: [
        'textarea[placeholder*="Message"]',
        'textarea[placeholder*="Send"]',
        'input[type="text"]',
        "textarea",
        'div[contenteditable="true"]',
    ])


class MessagingSettings(BaseModel):
    """
    Cross-context messaging settings.
    
    Attributes:
        retry_delay_ms: Settle delay before the single delivery retry
        resolve_timeout_ms: Timeout for a correlated locator resolution
    """
    retry_delay_ms: int = Field(default=1000, ge=0, le=60000)
    resolve_timeout_ms: int = Field(default=5000, ge=1, le=300000)


class LoggingSettings(BaseModel):
    """
    Logging configuration, applied by utils.logging.configure_logging.

    Attributes:
        level: Root log level (--verbose forces DEBUG)
        file: Optional log file alongside the stderr console
        json_format: Write the log file as JSON lines
    """
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file: Optional[str] = None
    json_format: bool = False


def _merged(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    """Return ``base`` with ``updates`` applied, recursing into nested sections."""
    result = dict(base)
    for key, value in updates.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = _merged(current, value)
        else:
            result[key] = value
    return result


class Settings(BaseSettings):
    """
    All Web Replay settings, grouped by the component that consumes them.

    Constructor values win over ``WEB_REPLAY__*`` environment variables,
    which win over field defaults. ConfigLoader feeds the YAML file in as
    constructor values.

    Example:
        >>> Settings(replay=ReplaySettings(navigation_settle_ms=0)).replay.navigation_settle_ms
        0
    """

    model_config = SettingsConfigDict(
        env_prefix="WEB_REPLAY__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    capture: CaptureSettings = Field(default_factory=CaptureSettings)
    replay: ReplaySettings = Field(default_factory=ReplaySettings)
    messaging: MessagingSettings = Field(default_factory=MessagingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def merge_with(self, overrides: Dict[str, Any]) -> "Settings":
        """
        Copy these settings with nested overrides applied.

        ``{"capture": {"typing_debounce_ms": 250}}`` changes one field and
        keeps the rest of the capture section.
        """
        return Settings(**_merged(self.model_dump(), overrides))
