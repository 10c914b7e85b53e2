"""
Job lifecycle models.
"""

import uuid
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from shared.models.config import PipelineConfig
from shared.models.scene import Scene, SubjectRegistryEntry


class JobState(str, Enum):
    IDLE = "idle"
    CANCELLING = "cancelling"
    SCRIPT_GENERATION = "script_generation"
    AUDIO_GENERATION = "audio_generation"
    HANDOFF = "handoff"
    AWAITING = "awaiting"
    COMPLETED = "completed"
    FAILED = "failed"


_ORDER = [
    JobState.IDLE,
    JobState.CANCELLING,
    JobState.SCRIPT_GENERATION,
    JobState.AUDIO_GENERATION,
    JobState.HANDOFF,
    JobState.AWAITING,
    JobState.COMPLETED,
]

TERMINAL_STATES = frozenset({JobState.COMPLETED, JobState.FAILED})


class SceneOutcome(BaseModel):
    """Result of one iteration of the per-scene audio/sync loop."""

    scene_index: int
    ok: bool
    error: Optional[str] = None
    audio_url: Optional[str] = None
    duration: Optional[float] = None
    duration_source: Optional[str] = None
    sync: Optional[str] = None


class Job(BaseModel):
    """A single production run."""

    job_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    config: PipelineConfig
    state: JobState = JobState.IDLE
    title: Optional[str] = None
    scenes: List[Scene] = Field(default_factory=list)
    subject_registry: List[SubjectRegistryEntry] = Field(default_factory=list)
    folder: Optional[str] = None
    report: List[SceneOutcome] = Field(default_factory=list)
    error: Optional[str] = None
    handoff_submitted: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def transition_to(self, new_state: JobState) -> None:
        """
        Advance the lifecycle state.

        Raises:
            ValueError: If the transition would move backwards or leave a terminal state
        """
        if self.is_terminal:
            raise ValueError(f"Job {self.job_id} is already {self.state.value}")
        if new_state == JobState.FAILED:
            self.state = new_state
            return
        if _ORDER.index(new_state) != _ORDER.index(self.state) + 1:
            raise ValueError(
                f"Invalid transition {self.state.value} -> {new_state.value}"
            )
        self.state = new_state

    def assign_folder(self, folder: str) -> bool:
        """
        Record the render collaborator's project folder.

        The first non-empty value is authoritative.

        Returns:
            False if a different folder was already assigned
        """
        folder = (folder or "").strip()
        if not folder:
            return True
        if self.folder is None:
            self.folder = folder
            return True
        return self.folder == folder

    def refresh_time_ranges(self) -> None:
        """Derive scene start/end times from the durations known so far."""
        cursor = 0.0
        for scene in self.scenes:
            if scene.duration is None:
                scene.start_time = None
                scene.end_time = None
                continue
            scene.start_time = cursor
            scene.end_time = cursor + scene.duration
            cursor = scene.end_time

    def descriptor(self) -> Dict[str, Any]:
        """Job descriptor submitted to the render collaborator."""
        config = self.config
        return {
            "jobId": self.job_id,
            "title": self.title,
            "structure": [scene.to_descriptor() for scene in self.scenes],
            "subject_registry": [
                entry.model_dump(mode="json") for entry in self.subject_registry
            ],
            "visualStyle": config.visual_style,
            "aspectRatio": config.aspect_ratio,
            "platform": config.platform,
            "mood": config.mood,
            "videoSource": config.video_source,
            "voiceId": config.voice_id,
            "channelStyleId": config.channel_style_id,
            "style_dna": config.style_dna.model_dump(mode="json") if config.style_dna else None,
        }
