"""
Steps - Immutable records of one observed or replayable action.

A step is one of four variants, tagged by ``type``. On the wire and in
trace files the payload fields sit next to ``t`` and ``type``::

    {"t": 0, "type": "navigate", "url": "https://example.com/"}
    {"t": 812, "type": "click", "target": {"locators": [...]}}
    {"t": 2410, "type": "type", "text": "hello"}
    {"t": 2455, "type": "press", "key": "Enter"}
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from web_replay.locators.models import CssLocator, Locator, XPathLocator, describe_locator


class StepType(str, Enum):
    """Types of recordable steps."""
    NAVIGATE = "navigate"
    CLICK = "click"
    TYPE = "type"
    PRESS = "press"


class _StepBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    t: int = Field(ge=0, description="Milliseconds since recording start")


class NavigateStep(_StepBase):
    type: Literal["navigate"] = "navigate"
    url: str


class ClickTarget(BaseModel):
    """The element a click landed on, as a ranked locator list."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    locators: List[Locator]


class ClickStep(_StepBase):
    type: Literal["click"] = "click"
    target: ClickTarget


class TypeStep(_StepBase):
    type: Literal["type"] = "type"
    text: str


class PressStep(_StepBase):
    type: Literal["press"] = "press"
    key: str


Step = Annotated[
    Union[NavigateStep, ClickStep, TypeStep, PressStep],
    Field(discriminator="type"),
]

STEP_MODELS = (NavigateStep, ClickStep, TypeStep, PressStep)

_STEP = TypeAdapter(Step)
_STEP_LIST = TypeAdapter(List[Step])


def parse_step(data: Dict[str, Any]) -> Step:
    """
    Validate one step dictionary.

    Raises:
        pydantic.ValidationError: If the step is malformed
    """
    return _STEP.validate_python(data)


def dump_steps(steps: List[Step]) -> List[Dict[str, Any]]:
    """Serialise steps to plain dictionaries in wire order (t, type, payload)."""
    return _STEP_LIST.dump_python(list(steps), mode="json")


def page_name(url: str) -> str:
    """
    Short page name for display: host without ``www.``, plus the first
    path segment when there is one.

    Example:
        >>> page_name("https://www.example.com/docs/intro")
        'example.com - docs'
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        parts = None

    if parts is None or not parts.hostname:
        name = url
        for prefix in ("https://", "http://"):
            if name.startswith(prefix):
                name = name[len(prefix):]
                break
        return name[4:] if name.startswith("www.") else name

    name = parts.hostname
    if name.startswith("www."):
        name = name[4:]

    segments = [segment for segment in parts.path.split("/") if segment]
    if segments:
        name += f" - {segments[0]}"
    return name


def describe_step(step: Step) -> str:
    """One-line human-readable description of a step."""
    if isinstance(step, NavigateStep):
        return f"Navigated to: {page_name(step.url)}"
    if isinstance(step, ClickStep):
        return "Clicked element"
    if isinstance(step, TypeStep):
        return f'Typed: "{step.text}"'
    if isinstance(step, PressStep):
        return f"Pressed: {step.key}"
    raise TypeError(f"Unsupported step: {step!r}")


def display_locators(step: Step) -> List[str]:
    """Descriptions of a click step's locators, structural ones left out."""
    if not isinstance(step, ClickStep):
        return []
    return [
        describe_locator(locator)
        for locator in step.target.locators
        if not isinstance(locator, (CssLocator, XPathLocator))
    ]
