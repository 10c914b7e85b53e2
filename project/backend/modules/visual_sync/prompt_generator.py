"""
Visual prompt generation for duration sync.
"""

from typing import List, Sequence

from shared.logging import get_logger
from modules.generation.client import GeneratedOutput, GenerationClient
from modules.script_writer.prompts import retention_strategy_for

logger = get_logger("visual_sync")

DEFAULT_STYLE = "Cinematic photorealistic"


def _prompt_list(result: GeneratedOutput, key: str) -> List[str]:
    if isinstance(result, dict) and isinstance(result.get(key), list):
        items = result[key]
    elif isinstance(result, list):
        items = result
    else:
        return []
    return [str(item) for item in items if item]


class VisualPromptGenerator:
    """Asks the generation client for shot prompts sized to a scene."""

    def __init__(self, client: GenerationClient):
        self.client = client

    async def generate_exact(
        self,
        niche: str,
        voiceover: str,
        count: int,
        visual_style: str = DEFAULT_STYLE
    ) -> List[str]:
        """
        Generate exactly ``count`` prompts for the scene narration.

        Raises:
            PipelineError: Propagated from the generation client
        """
        strategy = retention_strategy_for(niche)
        system_prompt = f"""You are an Expert Visual Director API.
ROLE: Generate a perfectly paced visual script for a video.
CONTEXT: We have the final voiceover and need exactly {count} visuals to match the duration.

VISUAL STYLE (CRITICAL): ALL prompts MUST use this visual style: {visual_style or DEFAULT_STYLE}
STRUCTURE: {strategy.structure_name}

VOICEOVER CONTEXT:
"{voiceover}"

INSTRUCTIONS:
1. Generate exactly {count} visual prompts.
2. Start wide if it is the beginning, move to close-ups for emotion.
3. Do not repeat angles.
4. Each prompt is a standalone 40-60 word description.
5. OUTPUT JSON ONLY: {{ "prompts": ["Shot 1...", "Shot 2..."] }}
"""
        result = await self.client.generate(system_prompt, f"Create {count} shots for this script section.")
        prompts = _prompt_list(result, "prompts")
        logger.info(f"Generated {len(prompts)} exact shots", extra={"requested": count})
        return prompts

    async def generate_additional(
        self,
        niche: str,
        voiceover: str,
        existing: Sequence[str],
        count: int,
        visual_style: str = DEFAULT_STYLE
    ) -> List[str]:
        """
        Generate ``count`` new prompts that do not repeat ``existing``.

        Raises:
            PipelineError: Propagated from the generation client
        """
        strategy = retention_strategy_for(niche)
        shots = "\n".join(f"Shot {i + 1}: {p}" for i, p in enumerate(existing))
        system_prompt = f"""You are an Expert Visual Director API.
ROLE: Expand a video scene by generating {count} NEW, UNIQUE video prompts.
CONTEXT: The voiceover is longer than expected, so we need more B-Roll shots to cover the audio.

VISUAL STYLE (CRITICAL): ALL prompts MUST use this visual style: {visual_style or DEFAULT_STYLE}
Match the existing shots' style exactly.
STRUCTURE: {strategy.structure_name}

EXISTING SHOTS (Do NOT repeat these):
{shots}

VOICEOVER CONTEXT:
"{voiceover}"

INSTRUCTIONS:
1. Generate exactly {count} NEW visual prompts, visually distinct from the existing ones.
2. Each prompt is a standalone 40-60 word description.
3. OUTPUT JSON ONLY: {{ "new_prompts": ["Prompt 1...", "Prompt 2..."] }}
"""
        result = await self.client.generate(system_prompt, f"Generate {count} new shots.")
        prompts = _prompt_list(result, "new_prompts")
        logger.info(f"Generated {len(prompts)} extra shots", extra={"requested": count})
        return prompts
