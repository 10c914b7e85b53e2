"""
Visual Sync Module.

Duration-driven reconciliation of per-scene visual prompt counts.
"""

from modules.visual_sync.duration import estimate_duration, measure_duration, needed_clip_count
from modules.visual_sync.prompt_generator import VisualPromptGenerator
from modules.visual_sync.sync import (
    PLACEHOLDER_PROMPT,
    DurationSyncEngine,
    SyncContext,
    SyncOutcome,
)

__all__ = [
    "estimate_duration",
    "measure_duration",
    "needed_clip_count",
    "VisualPromptGenerator",
    "PLACEHOLDER_PROMPT",
    "DurationSyncEngine",
    "SyncContext",
    "SyncOutcome",
]
