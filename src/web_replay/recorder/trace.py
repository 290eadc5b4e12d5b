"""
Trace - Versioned, ordered log of captured steps and its file format.

A trace file is a JSON document ``{"version": 1, "steps": [...]}``. Loading
is all-or-nothing: a document missing ``version`` or ``steps``, or holding
any malformed step, is rejected and no step is adopted.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from web_replay.exceptions import InvalidTraceError
from web_replay.recorder.steps import Step, dump_steps

logger = logging.getLogger(__name__)

TRACE_VERSION = 1
TRACE_FILENAME_FORMAT = "trace-%Y-%m-%dT%H-%M-%S.json"


class Trace(BaseModel):
    """
    A captured interaction sequence.

    Attributes:
        version: File format version
        steps: Steps in replay order
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    version: int = Field(ge=1)
    steps: List[Step]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"version": self.version, "steps": dump_steps(self.steps)}

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Any, source: Optional[str] = None) -> "Trace":
        """
        Validate a trace document.

        Raises:
            InvalidTraceError: If the document is not a well-formed trace
        """
        if not isinstance(data, dict):
            raise InvalidTraceError("Trace must be a JSON object", source=source)

        missing = [key for key in ("version", "steps") if key not in data]
        if missing:
            raise InvalidTraceError(
                f"Invalid trace: missing {', '.join(missing)}",
                source=source,
            )

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise InvalidTraceError(
                f"Invalid trace: {len(errors)} validation error(s)",
                errors=errors,
                source=source,
            ) from e

    @classmethod
    def from_json(cls, json_str: str, source: Optional[str] = None) -> "Trace":
        """Create from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise InvalidTraceError(f"Invalid trace: not JSON ({e})", source=source) from e
        return cls.from_dict(data, source=source)


def trace_filename(when: Optional[datetime] = None) -> str:
    """
    Default download name for a trace.

    Example:
        >>> trace_filename(datetime(2024, 5, 1, 13, 4, 9))
        'trace-2024-05-01T13-04-09.json'
    """
    return (when or datetime.now()).strftime(TRACE_FILENAME_FORMAT)


def load_trace(path: Union[str, Path]) -> Trace:
    """
    Load a trace file.

    Raises:
        InvalidTraceError: If the file is unreadable or malformed
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise InvalidTraceError(f"Cannot read trace file: {e}", source=str(path)) from e

    trace = Trace.from_json(content, source=str(path))
    logger.info(f"Loaded trace with {len(trace.steps)} steps from {path}")
    return trace


def save_trace(trace: Trace, path: Union[str, Path]) -> Path:
    """
    Write a trace file.

    Args:
        trace: Trace to write
        path: Target file, or a directory to write a timestamped file into

    Returns:
        The path written
    """
    path = Path(path)
    if path.is_dir():
        path = path / trace_filename()

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(trace.to_json(), encoding="utf-8")
    logger.info(f"Saved trace with {len(trace.steps)} steps to {path}")
    return path
