"""
Protocol - Messages exchanged between the orchestrator and page executors.

Requests flow orchestrator → executor and each gets a ``Response``.
Pushes flow executor → orchestrator without a reply. Field names on the
wire are camelCase (``messageId``, ``startTime``, ``locatorType``).
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from web_replay.locators.models import Locator
from web_replay.recorder.steps import Step


class MessageType(str, Enum):
    """All message types of the protocol."""
    # Requests
    START_RECORDING = "START_RECORDING"
    STOP_RECORDING = "STOP_RECORDING"
    GET_STEPS = "GET_STEPS"
    RESOLVE_LOCATOR = "RESOLVE_LOCATOR"
    REPLAY_CLICK = "REPLAY_CLICK"
    REPLAY_TYPE = "REPLAY_TYPE"
    REPLAY_KEY_PRESS = "REPLAY_KEY_PRESS"
    # Pushes
    RECORDING_STARTED = "RECORDING_STARTED"
    RECORDING_STOPPED = "RECORDING_STOPPED"
    RECORD_STEP = "RECORD_STEP"
    LOCATOR_RESOLVED = "LOCATOR_RESOLVED"


class Message(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        """Plain dictionary with wire field names."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Requests
# =============================================================================

class StartRecording(Message):
    type: Literal["START_RECORDING"] = "START_RECORDING"


class StopRecording(Message):
    type: Literal["STOP_RECORDING"] = "STOP_RECORDING"


class GetSteps(Message):
    type: Literal["GET_STEPS"] = "GET_STEPS"


class ResolveLocator(Message):
    """Resolve a locator list; answered by a LOCATOR_RESOLVED push."""
    type: Literal["RESOLVE_LOCATOR"] = "RESOLVE_LOCATOR"
    locators: List[Locator]
    message_id: str = Field(alias="messageId")


class ReplayClick(Message):
    """Click a selector, or an element reference (``ref:<id>``) issued by this executor."""
    type: Literal["REPLAY_CLICK"] = "REPLAY_CLICK"
    selector: str


class ReplayType(Message):
    """Type text; the response is deferred until typing has finished."""
    type: Literal["REPLAY_TYPE"] = "REPLAY_TYPE"
    text: str


class ReplayKeyPress(Message):
    type: Literal["REPLAY_KEY_PRESS"] = "REPLAY_KEY_PRESS"
    key: str


Request = Annotated[
    Union[
        StartRecording,
        StopRecording,
        GetSteps,
        ResolveLocator,
        ReplayClick,
        ReplayType,
        ReplayKeyPress,
    ],
    Field(discriminator="type"),
]

REQUEST_MODELS = (
    StartRecording,
    StopRecording,
    GetSteps,
    ResolveLocator,
    ReplayClick,
    ReplayType,
    ReplayKeyPress,
)


# =============================================================================
# Pushes
# =============================================================================

class RecordingStarted(Message):
    type: Literal["RECORDING_STARTED"] = "RECORDING_STARTED"
    start_time: int = Field(alias="startTime")


class RecordingStopped(Message):
    type: Literal["RECORDING_STOPPED"] = "RECORDING_STOPPED"
    steps: List[Step]


class RecordStep(Message):
    type: Literal["RECORD_STEP"] = "RECORD_STEP"
    step: Step


class LocatorResolved(Message):
    """
    Outcome of a RESOLVE_LOCATOR request.

    ``selector`` is None for no match; ``locator_type`` names the winning
    locator.
    """
    type: Literal["LOCATOR_RESOLVED"] = "LOCATOR_RESOLVED"
    message_id: str = Field(alias="messageId")
    selector: Optional[str] = None
    locator_type: Optional[str] = Field(default=None, alias="locatorType")


Push = Annotated[
    Union[RecordingStarted, RecordingStopped, RecordStep, LocatorResolved],
    Field(discriminator="type"),
]


class Response(BaseModel):
    """
    Reply to a request.

    Attributes:
        success: Whether the executor carried out the request
        error: Failure description
        steps: Captured steps (GET_STEPS only)
    """
    model_config = ConfigDict(frozen=True)

    success: bool = True
    error: Optional[str] = None
    steps: Optional[List[Step]] = None

    @classmethod
    def ok(cls, **kwargs: Any) -> "Response":
        return cls(success=True, **kwargs)

    @classmethod
    def fail(cls, error: Optional[str] = None) -> "Response":
        return cls(success=False, error=error)


_REQUEST = TypeAdapter(Request)
_PUSH = TypeAdapter(Push)


def parse_request(data: Dict[str, Any]) -> Request:
    """
    Validate a request dictionary.

    Raises:
        pydantic.ValidationError: If the message is malformed or of an unknown type
    """
    return _REQUEST.validate_python(data)


def parse_push(data: Dict[str, Any]) -> Push:
    return _PUSH.validate_python(data)
