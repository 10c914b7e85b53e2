"""
Data models for the production pipeline.

This module exports all Pydantic models used across pipeline modules.
"""

from .config import (
    PipelineConfig,
    StyleDNA,
    VisualIdentity,
    Cinematography,
    StyleConstraints,
    VoiceProfile,
)
from .scene import Scene, SceneKind, SubjectKind, SubjectRegistryEntry
from .job import Job, JobState, SceneOutcome, TERMINAL_STATES
from .events import (
    ArtifactFile,
    LogEvent,
    CompletedEvent,
    ProgressEvent,
    parse_progress_event,
    FINAL_VIDEO_NAME,
)

__all__ = [
    # Config models
    "PipelineConfig",
    "StyleDNA",
    "VisualIdentity",
    "Cinematography",
    "StyleConstraints",
    "VoiceProfile",
    # Scene models
    "Scene",
    "SceneKind",
    "SubjectKind",
    "SubjectRegistryEntry",
    # Job models
    "Job",
    "JobState",
    "SceneOutcome",
    "TERMINAL_STATES",
    # Event models
    "ArtifactFile",
    "LogEvent",
    "CompletedEvent",
    "ProgressEvent",
    "parse_progress_event",
    "FINAL_VIDEO_NAME",
]
