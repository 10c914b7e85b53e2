"""
Scene and subject registry models.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SceneKind(str, Enum):
    CHARACTER = "character"
    ESTABLISHING = "establishing"
    MULTI_CHARACTER = "multi_character"


class SubjectKind(str, Enum):
    CHARACTER = "character"
    CREATURE = "creature"
    OBJECT = "object"


class SubjectRegistryEntry(BaseModel):
    """A recurring subject kept visually consistent across scenes."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = Field(default="", validation_alias=AliasChoices("name", "display_name"))
    kind: SubjectKind = Field(
        default=SubjectKind.CHARACTER,
        validation_alias=AliasChoices("kind", "type")
    )
    visual_description: str = Field(
        default="",
        validation_alias=AliasChoices("visual_description", "description")
    )
    scenes: List[int] = Field(
        default_factory=list,
        validation_alias=AliasChoices("scenes", "appears_in_scenes", "scene_indices")
    )
    is_primary: bool = False


class Scene(BaseModel):
    """
    One narrative beat of the script.

    visual_prompts is rewritten by the duration sync engine once the
    duration is known.
    """

    index: int
    section: Optional[str] = None
    kind: SceneKind = SceneKind.ESTABLISHING
    subject_id: Optional[str] = None
    secondary_subject_id: Optional[str] = None
    voiceover: str = ""
    image_prompt: Optional[str] = None
    visual_prompts: List[str] = Field(default_factory=list)
    camera_motion: Optional[str] = None
    duration: Optional[float] = None
    duration_source: Optional[Literal["measured", "estimated"]] = None
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    audio_url: Optional[str] = None

    @property
    def has_narration(self) -> bool:
        return bool(self.voiceover and self.voiceover.strip())

    def to_descriptor(self) -> Dict[str, Any]:
        """Scene entry of the render job descriptor."""
        return {
            "section": self.section,
            "scene_type": self.kind.value,
            "subject_id": self.subject_id,
            "secondary_subject_id": self.secondary_subject_id,
            "voiceover": self.voiceover,
            "image_prompt": self.image_prompt,
            "video_prompts": list(self.visual_prompts),
            "motion_prompt": self.camera_motion,
            "duration": self.duration,
            "audioUrl": self.audio_url,
        }
