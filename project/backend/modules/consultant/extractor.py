"""
Structured response extraction.

Pulls the configuration object out of the consultant's free-form reply.
The object arrives either as a fenced ```json block or inline, starting with
a {"ready": ...} marker.
"""

import json
import re
from typing import Any, Dict, Optional, Tuple

from shared.logging import get_logger
from modules.consultant.voices import voice_for_niche

logger = get_logger("consultant")

_FENCED_BLOCK = re.compile(r"```json\n([\s\S]*?)\n```")
_READY_MARKER = re.compile(r'\{\s*"ready"\s*:')


def _find_balanced_object(text: str, start: int) -> Optional[int]:
    """
    Return the index just past the brace that closes the object at ``start``.

    String literals are skipped so braces inside values do not count.
    """
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return None


def _locate(text: str) -> Optional[Tuple[str, str]]:
    """Return (matched substring, JSON payload) or None."""
    fenced = _FENCED_BLOCK.search(text)
    if fenced:
        return fenced.group(0), fenced.group(1)

    marker = _READY_MARKER.search(text)
    if not marker:
        return None
    end = _find_balanced_object(text, marker.start())
    if end is None:
        # Unterminated object: hand the tail to the parser so the failure is logged
        return text[marker.start():], text[marker.start():]
    matched = text[marker.start():end]
    return matched, matched


def enrich_with_voice(config: Dict[str, Any]) -> Dict[str, Any]:
    """Attach voiceId/voiceGender/voiceDescription derived from the niche."""
    niche = config.get("niche")
    if not niche:
        return config
    voice = voice_for_niche(str(niche))
    config["voiceId"] = voice.id
    config["voiceGender"] = voice.gender
    config["voiceDescription"] = voice.description
    logger.info(
        f"Auto-selected voice: {voice.id} ({voice.description})",
        extra={"niche": niche, "voice_id": voice.id}
    )
    return config


def extract(free_text: str) -> Tuple[str, Optional[Dict[str, Any]]]:
    """
    Split a consultant reply into display text and configuration.

    Args:
        free_text: Raw assistant reply

    Returns:
        (display_text, config). config is None when no object is present or
        it fails to parse, in which case display_text is the original reply.
    """
    located = _locate(free_text)
    if located is None:
        return free_text, None

    matched, payload = located
    try:
        config = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse consultant JSON: {e}", extra={"payload_length": len(payload)})
        return free_text, None

    if not isinstance(config, dict):
        logger.warning("Consultant JSON is not an object, ignoring")
        return free_text, None

    display_text = free_text.replace(matched, "", 1).strip()
    return display_text, enrich_with_voice(config)
