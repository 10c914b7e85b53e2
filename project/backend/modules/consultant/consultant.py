"""
Consultant conversation turn.

Gathers production parameters from the operator and emits the configuration
object that starts the pipeline once it is marked ready.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from shared.logging import get_logger
from modules.generation.client import GenerationClient
from modules.consultant.extractor import enrich_with_voice, extract

logger = get_logger("consultant")

OFFLINE_MESSAGE = "System Error: The Consultant is offline."
EMPTY_REPLY_MESSAGE = "I'm having trouble thinking. Can you repeat that?"
USER_QUERY = (
    "Reply to the user. If they specified or changed any parameter, "
    "include an updated JSON config block."
)

SYSTEM_PROMPT_TEMPLATE = """You are 'The Consultant', an elite Video Production Manager & Creative Director.

YOUR ROLE: You gather ALL requirements from the user, lock each parameter and
hand a COMPLETE config to the Director, who uses it EXACTLY as specified.

PARAMETERS:
1. TOPIC (required): what the video is about.
2. NICHE (required): Gaming, Horror, Tech, Documentary, ...
3. VIDEO LENGTH (required): "30 seconds", "3-5 minutes", "1000 words", ...
4. VOICE STYLE (required): gender and tone, e.g. "Deep male narrator".
5. VISUAL STYLE (required): Cinematic, Anime, 2D Animated, 3D CGI, Documentary, Horror, Retro.
6. ASPECT RATIO (required): 16:9 (default), 9:16, 1:1, 4:3.
7. PLATFORM (optional): YouTube, TikTok/Reels, Instagram.
8. MOOD (optional): Epic, Mysterious, Uplifting, Dark, Comedic, Educational, Inspiring.

RULES:
- When the user changes ANY parameter, apply it and re-output the full JSON.
- Once a visual style is chosen it is locked. Never mix styles.
- Defaults when unspecified: aspectRatio "16:9", platform "YouTube", mood "Cinematic".
- When you have enough info, output:
```json
{{
  "ready": true,
  "topic": "...",
  "niche": "...",
  "videoLength": "30 seconds",
  "voiceStyle": "Deep male narrator",
  "visualStyle": "Anime",
  "aspectRatio": "9:16",
  "platform": "TikTok",
  "mood": "Epic"
}}
```

CURRENT CONVERSATION:
{conversation}
"""


class ConsultantReply(BaseModel):
    """Display text plus the extracted configuration, if any."""

    message: str
    config: Optional[Dict[str, Any]] = None

    @property
    def ready(self) -> bool:
        return bool(self.config and self.config.get("ready"))


def build_consultant_prompt(history: List[Dict[str, str]]) -> str:
    conversation = "\n".join(
        f"{turn.get('role', 'user').upper()}: {turn.get('content', '')}" for turn in history
    )
    return SYSTEM_PROMPT_TEMPLATE.format(conversation=conversation)


async def consult_with_user(
    history: List[Dict[str, str]],
    client: GenerationClient
) -> ConsultantReply:
    """
    Run one consultant turn.

    Args:
        history: Conversation so far as {role, content} dicts
        client: Generation client

    Returns:
        ConsultantReply. Generation failures yield the offline message.
    """
    try:
        result = await client.generate(build_consultant_prompt(history), USER_QUERY)
    except Exception as e:
        logger.error(f"Consultant generation failed: {str(e)}", exc_info=e)
        return ConsultantReply(message=OFFLINE_MESSAGE)

    if isinstance(result, str):
        message, config = extract(result)
        if config is not None:
            logger.info("Extracted consultant config", extra={"ready": bool(config.get("ready"))})
        return ConsultantReply(message=message, config=config)

    if isinstance(result, dict) and "ready" in result:
        # Whole reply was the JSON block
        config = enrich_with_voice(dict(result))
        return ConsultantReply(message=str(config.pop("response", "") or ""), config=config)

    if isinstance(result, dict):
        return ConsultantReply(message=str(result.get("response") or EMPTY_REPLY_MESSAGE))

    return ConsultantReply(message=json.dumps(result))
