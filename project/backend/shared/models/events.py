"""
Progress channel events.

Tagged union of the JSON payloads pushed by the render collaborator.
"""

import json
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

FINAL_VIDEO_NAME = "final_video.mp4"


class ArtifactFile(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = ""
    path: str
    is_final: bool = Field(default=False, alias="isFinal")


class LogEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["log"]
    message: str
    timestamp: Optional[int] = None


class CompletedEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["completed"]
    message: str = ""
    files: List[ArtifactFile] = Field(default_factory=list)

    def final_artifact(self) -> Optional[ArtifactFile]:
        """The artifact flagged final, or the well-known final video file."""
        for artifact in self.files:
            if artifact.is_final or artifact.name == FINAL_VIDEO_NAME:
                return artifact
        return None


ProgressEvent = Annotated[Union[LogEvent, CompletedEvent], Field(discriminator="type")]

_progress_event_adapter = TypeAdapter(ProgressEvent)
_KNOWN_TYPES = ("log", "completed")


def parse_progress_event(raw: str) -> Optional[Union[LogEvent, CompletedEvent]]:
    """
    Parse one message from the progress channel.

    Args:
        raw: JSON text of a single event

    Returns:
        The event, or None for event kinds this client does not handle

    Raises:
        ValueError: If the payload is not valid JSON or fails validation
    """
    data = json.loads(raw)
    if not isinstance(data, dict) or data.get("type") not in _KNOWN_TYPES:
        return None
    return _progress_event_adapter.validate_python(data)
