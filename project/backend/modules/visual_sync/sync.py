"""
Duration sync engine.

Once a scene's narration length is known, make its visual prompt list exactly
as long as the number of clips needed to cover it.

Tiers, in order:
1. regenerate the whole list at the exact size
2. ask for the missing prompts only
3. cycle what exists (or a placeholder) and truncate any surplus
"""

from enum import Enum
from typing import List

from pydantic import BaseModel

from shared.logging import get_logger
from shared.models.config import PipelineConfig
from shared.models.scene import Scene
from modules.visual_sync.duration import estimate_duration, needed_clip_count
from modules.visual_sync.prompt_generator import DEFAULT_STYLE, VisualPromptGenerator

logger = get_logger("visual_sync")

PLACEHOLDER_PROMPT = "Cinematic B-Roll Placeholder"


class SyncOutcome(str, Enum):
    UNCHANGED = "unchanged"
    REGENERATED = "regenerated"
    FILLED = "filled"
    PADDED = "padded"


class SyncContext(BaseModel):
    """Job-level settings that seed prompt generation."""

    niche: str = ""
    visual_style: str = DEFAULT_STYLE

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "SyncContext":
        return cls(niche=config.niche, visual_style=config.visual_style or DEFAULT_STYLE)


def pad_prompts(prompts: List[str], needed: int) -> List[str]:
    """Cycle the prompts (or the placeholder) to exactly ``needed`` entries."""
    base = prompts or [PLACEHOLDER_PROMPT]
    return [base[i % len(base)] for i in range(needed)]


class DurationSyncEngine:
    """Reconciles visual prompt counts with scene durations."""

    def __init__(self, generator: VisualPromptGenerator):
        self.generator = generator

    async def reconcile(
        self,
        scene: Scene,
        clip_length_seconds: float,
        context: SyncContext
    ) -> SyncOutcome:
        """
        Resize ``scene.visual_prompts`` to cover the scene duration.

        Generator failures are logged and fall through to the next tier.

        Args:
            scene: Scene to reconcile (mutated in place)
            clip_length_seconds: Length of one rendered clip
            context: Niche and visual style for prompt generation

        Returns:
            Which tier produced the final list
        """
        if scene.duration is None:
            scene.duration = estimate_duration(scene.voiceover)
            scene.duration_source = "estimated"

        needed = needed_clip_count(scene.duration, clip_length_seconds)
        current = list(scene.visual_prompts)
        log_extra = {"scene_index": scene.index, "needed": needed, "current": len(current)}

        if len(current) == needed:
            return SyncOutcome.UNCHANGED

        logger.info(
            f"Scene {scene.index}: syncing visuals to {scene.duration:.1f}s "
            f"({len(current)} -> {needed} prompts)",
            extra=log_extra
        )

        outcome = None
        prompts = current

        try:
            exact = await self.generator.generate_exact(
                context.niche, scene.voiceover, needed, context.visual_style
            )
        except Exception as e:
            logger.warning(f"Scene {scene.index}: exact visual generation failed: {str(e)}", extra=log_extra)
            exact = []

        if exact:
            prompts = exact[:needed]
            outcome = SyncOutcome.REGENERATED

        if len(prompts) < needed:
            deficit = needed - len(prompts)
            try:
                extra = await self.generator.generate_additional(
                    context.niche, scene.voiceover, prompts, deficit, context.visual_style
                )
            except Exception as e:
                logger.warning(f"Scene {scene.index}: extra visual generation failed: {str(e)}", extra=log_extra)
                extra = []
            extra = [p for p in extra if p not in prompts][:deficit]
            if extra:
                prompts = prompts + extra
                outcome = SyncOutcome.FILLED

        if len(prompts) != needed:
            logger.warning(
                f"Scene {scene.index}: padding visuals from {len(prompts)} to {needed}",
                extra=log_extra
            )
            prompts = pad_prompts(prompts, needed)
            outcome = SyncOutcome.PADDED

        scene.visual_prompts = prompts
        return outcome
