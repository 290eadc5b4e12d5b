"""
Messaging Module - Orchestrator ↔ page executor protocol and channel.
"""

from web_replay.messaging.protocol import (
    Message,
    MessageType,
    StartRecording,
    StopRecording,
    GetSteps,
    ResolveLocator,
    ReplayClick,
    ReplayType,
    ReplayKeyPress,
    RecordingStarted,
    RecordingStopped,
    RecordStep,
    LocatorResolved,
    Request,
    Push,
    Response,
    REQUEST_MODELS,
    parse_request,
    parse_push,
)
from web_replay.messaging.messenger import Messenger

__all__ = [
    "Message",
    "MessageType",
    "StartRecording",
    "StopRecording",
    "GetSteps",
    "ResolveLocator",
    "ReplayClick",
    "ReplayType",
    "ReplayKeyPress",
    "RecordingStarted",
    "RecordingStopped",
    "RecordStep",
    "LocatorResolved",
    "Request",
    "Push",
    "Response",
    "REQUEST_MODELS",
    "parse_request",
    "parse_push",
    "Messenger",
]
