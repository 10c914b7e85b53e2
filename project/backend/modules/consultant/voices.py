"""
Voice selection.

Maps a niche or a free-form voice style onto a Piper TTS voice.
"""

from typing import List, Tuple

from shared.models.config import VoiceProfile

# Ordered: the first niche key contained in the requested niche wins.
NICHE_VOICES: List[Tuple[str, VoiceProfile]] = [
    ("horror", VoiceProfile(id="en_US-ryan-medium", gender="male", description="Deep dramatic voice for horror/drama")),
    ("documentary", VoiceProfile(id="en_US-norman-medium", gender="male", description="Serious narrator for documentaries")),
    ("history", VoiceProfile(id="en_US-norman-medium", gender="male", description="Educational authoritative voice")),
    ("gaming", VoiceProfile(id="en_US-bryce-medium", gender="male", description="Confident energetic for gaming")),
    ("tech", VoiceProfile(id="en_US-lessac-medium", gender="male", description="Neutral professional for tech")),
    ("vlog", VoiceProfile(id="en_US-joe-medium", gender="male", description="Warm friendly for vlogs")),
    ("entertainment", VoiceProfile(id="en_US-joe-medium", gender="male", description="Energetic for entertainment")),
    ("health", VoiceProfile(id="en_US-amy-medium", gender="female", description="Warm caring for health/lifestyle")),
    ("professional", VoiceProfile(id="en_US-hfc_female-medium", gender="female", description="Clear professional for business")),
    ("calm", VoiceProfile(id="en_US-danny-low", gender="male", description="Calm soothing for ASMR/meditation")),
]

DEFAULT_VOICE = VoiceProfile(id="en_US-lessac-medium", gender="male", description="Neutral default voice")

_STYLE_VOICES = [
    (("dramatic", "horror", "deep"), "ryan"),
    (("friendly", "warm", "vlog"), "joe"),
]


def voice_for_niche(niche: str) -> VoiceProfile:
    """
    Pick the voice for a content niche.

    Args:
        niche: Free-form niche, e.g. "Horror Stories" or "tech reviews"

    Returns:
        Matching voice, or the neutral default
    """
    lowered = (niche or "").lower()
    for key, voice in NICHE_VOICES:
        if key in lowered:
            return voice
    return DEFAULT_VOICE


def voice_for_style(voice_style: str) -> VoiceProfile:
    """Pick a voice from the consultant's voice style description."""
    lowered = (voice_style or "").lower()
    for keywords, name in _STYLE_VOICES:
        if any(k in lowered for k in keywords):
            for _, voice in NICHE_VOICES:
                if voice.id == f"en_US-{name}-medium":
                    return voice
    return DEFAULT_VOICE
