"""
Script writer.

Calls the generation client with the script prompt and turns the reply into
typed scenes and a subject registry.
"""

import re
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from shared.errors import DataQualityError, StructuralError
from shared.logging import get_logger, log_data_quality
from shared.models.config import PipelineConfig
from shared.models.scene import Scene, SubjectRegistryEntry
from modules.generation.client import GeneratedOutput, GenerationClient
from modules.script_writer.classifier import classify, coerce_text, validate_registry
from modules.script_writer.motion import motion_for
from modules.script_writer.prompts import build_script_prompt

logger = get_logger("script_writer")

DEFAULT_TITLE = "video_project"


class ScriptResult(BaseModel):
    """Parsed script ready for the audio stage."""

    title: str
    scenes: List[Scene] = Field(default_factory=list)
    subject_registry: List[SubjectRegistryEntry] = Field(default_factory=list)


def slugify_title(raw: Optional[str]) -> str:
    """Replace anything outside [A-Za-z0-9_-] with '_' and lowercase."""
    return re.sub(r"[^a-zA-Z0-9_\-]", "_", raw or DEFAULT_TITLE).lower()


def _as_prompt_list(value: Any) -> List[str]:
    if isinstance(value, list):
        return [str(p) for p in value if p]
    if isinstance(value, str) and value.strip():
        return [value]
    return []


def parse_registry(raw_registry: Any) -> List[SubjectRegistryEntry]:
    """Parse registry entries, skipping malformed ones with a warning."""
    if not isinstance(raw_registry, list):
        return []
    entries = []
    for raw in raw_registry:
        if isinstance(raw, dict) and "id" in raw:
            raw = {**raw, "id": coerce_text(raw["id"])}
        try:
            entries.append(SubjectRegistryEntry.model_validate(raw))
        except PydanticValidationError as e:
            log_data_quality(logger, DataQualityError(
                f"Skipping malformed subject registry entry: {e.error_count()} errors",
                code="BAD_REGISTRY_ENTRY"
            ))
    return entries


def parse_script(result: GeneratedOutput, config: PipelineConfig) -> ScriptResult:
    """
    Convert the script generation reply into a ScriptResult.

    Raises:
        StructuralError: If the reply is not an object or has no scenes
    """
    if not isinstance(result, dict):
        raise StructuralError("Script generation returned no JSON object", code="NO_SCRIPT")

    structure = result.get("structure")
    if not isinstance(structure, list) or not structure:
        raise StructuralError("Script has no structure", code="EMPTY_STRUCTURE")

    registry = parse_registry(result.get("subject_registry"))
    validate_registry(registry)

    scenes: List[Scene] = []
    for raw in structure:
        if not isinstance(raw, dict):
            log_data_quality(logger, DataQualityError("Skipping non-object scene in structure", code="BAD_SCENE"))
            continue
        index = len(scenes) + 1
        kind, issues = classify(raw, registry)
        for issue in issues:
            log_data_quality(logger, issue, scene_index=index)

        scenes.append(Scene(
            index=index,
            section=coerce_text(raw.get("section")),
            kind=kind,
            subject_id=coerce_text(raw.get("subject_id")),
            secondary_subject_id=coerce_text(raw.get("secondary_subject_id")),
            voiceover=str(raw.get("voiceover") or ""),
            image_prompt=coerce_text(raw.get("image_prompt")),
            visual_prompts=_as_prompt_list(raw.get("video_prompts")),
            camera_motion=motion_for(kind.value, config.mood, coerce_text(raw.get("motion_prompt")), index - 1),
        ))

    if not scenes:
        raise StructuralError("Script has no usable scenes", code="EMPTY_STRUCTURE")

    title_options = result.get("title_options")
    first_title = coerce_text(title_options[0]) if isinstance(title_options, list) and title_options else None
    title = slugify_title(first_title or config.topic or DEFAULT_TITLE)

    return ScriptResult(title=title, scenes=scenes, subject_registry=registry)


class ScriptWriter:
    """Produces the scene list for a job."""

    def __init__(self, client: GenerationClient):
        self.client = client

    async def generate(self, config: PipelineConfig) -> ScriptResult:
        """
        Generate and parse a script.

        Raises:
            StructuralError: Missing or empty structure
            PipelineError: Generation failures from the client
        """
        system_prompt = build_script_prompt(config)
        result = await self.client.generate(system_prompt, f'Create a script for: "{config.topic}"')
        script = parse_script(result, config)
        logger.info(
            f"Script ready: {len(script.scenes)} scenes",
            extra={"title": script.title, "subjects": len(script.subject_registry)}
        )
        return script
