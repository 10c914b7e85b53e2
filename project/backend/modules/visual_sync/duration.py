"""
Scene duration helpers.
"""

import io
import math
from typing import Optional

import mutagen

from shared.logging import get_logger

logger = get_logger("visual_sync")

WORDS_PER_SECOND = 2.5
MIN_ESTIMATED_SECONDS = 5.0


def estimate_duration(
    text: str,
    words_per_second: float = WORDS_PER_SECOND,
    floor_seconds: float = MIN_ESTIMATED_SECONDS
) -> float:
    """
    Estimate narration length from word count.

    Args:
        text: Narration text
        words_per_second: Speaking rate
        floor_seconds: Minimum duration returned

    Returns:
        max(floor_seconds, ceil(words / words_per_second))
    """
    words = len((text or "").split())
    return float(max(floor_seconds, math.ceil(words / words_per_second)))


def measure_duration(audio_bytes: bytes) -> Optional[float]:
    """
    Read the duration of a synthesized audio file.

    Returns:
        Duration in seconds, or None if the format is not recognised
    """
    if not audio_bytes:
        return None
    try:
        audio = mutagen.File(io.BytesIO(audio_bytes))
    except mutagen.MutagenError as e:
        logger.warning(f"Could not read audio metadata: {str(e)}")
        return None
    if audio is None or audio.info is None:
        return None
    length = getattr(audio.info, "length", None)
    if not length or length <= 0:
        return None
    return float(length)


def needed_clip_count(duration: float, clip_length_seconds: float) -> int:
    """Number of clips covering the duration, at least one."""
    # Tolerance keeps 10.000000001 / 5 at 2 clips
    return max(1, math.ceil(duration / clip_length_seconds - 1e-9))
