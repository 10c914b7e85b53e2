"""
Pipeline configuration models.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class VisualIdentity(BaseModel):
    """Look of every generated visual."""

    model_config = ConfigDict(frozen=True)

    art_style: str = ""
    color_palette: str = ""
    lighting_setup: str = ""
    texture_quality: str = ""


class Cinematography(BaseModel):
    model_config = ConfigDict(frozen=True)

    default_lens: str = ""
    default_angle: str = ""
    motion_style: str = ""


class StyleConstraints(BaseModel):
    """Keywords that must never / must always appear in prompts."""

    model_config = ConfigDict(frozen=True)

    forbidden_keywords: List[str] = Field(default_factory=list)
    required_keywords: List[str] = Field(default_factory=list)


class StyleDNA(BaseModel):
    """Style identity passed from the consultant to the script writer."""

    model_config = ConfigDict(frozen=True)

    visual_identity: VisualIdentity = Field(default_factory=VisualIdentity)
    cinematography: Cinematography = Field(default_factory=Cinematography)
    constraints: StyleConstraints = Field(default_factory=StyleConstraints)


class VoiceProfile(BaseModel):
    """A TTS voice choice."""

    model_config = ConfigDict(frozen=True)

    id: str
    gender: Literal["male", "female"]
    description: str


class PipelineConfig(BaseModel):
    """
    Production settings for a single job.

    Produced by the consultant extractor or a manual form. Accepts the
    camelCase keys the assistant emits; frozen once constructed.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    topic: str
    niche: str = ""
    video_length: str = Field(default="5-7 minutes", alias="videoLength")
    voice_style: str = Field(default="Conversational", alias="voiceStyle")
    visual_style: str = Field(default="Cinematic", alias="visualStyle")
    aspect_ratio: str = Field(default="16:9", alias="aspectRatio")
    platform: str = "YouTube"
    mood: str = "Cinematic"
    video_source: Literal["meta", "grok"] = Field(default="meta", alias="videoSource")
    channel_style_id: Optional[str] = Field(default=None, alias="channelStyleId")
    style_dna: Optional[StyleDNA] = None
    ready: bool = False

    # Derived from the niche by the consultant extractor
    voice_id: Optional[str] = Field(default=None, alias="voiceId")
    voice_gender: Optional[str] = Field(default=None, alias="voiceGender")
    voice_description: Optional[str] = Field(default=None, alias="voiceDescription")
