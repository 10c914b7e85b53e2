"""
Camera motion library.

Maps a scene kind and mood onto a camera movement directive.
"""

from typing import Dict, List, Optional

MOTION_LIBRARY: Dict[str, Dict[str, List[str]]] = {
    "establishing": {
        "default": [
            "slow aerial pan across the landscape, cinematic and sweeping",
            "wide dolly shot revealing the full environment, smooth and steady",
            "gentle crane shot ascending to reveal the panorama, golden hour light",
            "slow lateral tracking shot across the scenery, shallow depth of field",
            "smooth drone flyover, gradually descending toward the subject",
        ],
        "epic": [
            "dramatic sweeping aerial pan with clouds, epic scale",
            "slow-motion crane reveal from ground level to vast vista, golden light",
            "wide orbiting shot around the landscape, majestic and grand",
        ],
        "mysterious": [
            "slow creeping dolly through fog-covered terrain, eerie atmosphere",
            "subtle push-in through mist, shadows shifting, tension building",
            "lateral drift through a dimly lit environment, unsettling stillness",
        ],
        "dark": [
            "slow descending crane into darkness, shadows consuming the frame",
            "ominous lateral tracking through storm-lit landscape",
            "distant wide shot, subtle zoom through rain and haze",
        ],
        "uplifting": [
            "soaring ascending crane shot, golden sunlight breaking through",
            "wide sweeping pan catching lens flare, hopeful and warm",
            "gentle rise from ground level to reveal sunrise over landscape",
        ],
    },
    "character": {
        "default": [
            "subtle push-in on the character, shallow depth of field, intimate",
            "slow zoom into the character's face, eyes in sharp focus",
            "gentle dolly-in with bokeh background, character fills the frame",
            "static medium shot with subtle breathing motion, cinematic",
        ],
        "epic": [
            "dramatic low-angle push-in, hero shot with wind in hair and clothing",
            "slow-motion zoom into determined eyes, power and resolve",
            "orbiting close-up, character silhouetted against dramatic sky",
        ],
        "mysterious": [
            "slow reveal push-in from shadows, face half-lit, suspense building",
            "subtle focus pull from background to character, tension",
            "creeping lateral slide revealing the character's profile, dim light",
        ],
        "dark": [
            "slow zoom into haunted expression, desaturated tones",
            "slight dutch-angle push-in, unease and discomfort",
            "close-up with flickering light casting shadows across the face",
        ],
        "comedic": [
            "quick snap zoom to surprised expression, punchy and fun",
            "playful dolly-in with head tilt, bright lighting, energetic",
            "slow-motion reaction shot for comedic timing",
        ],
        "emotional": [
            "very slow push-in to glistening eyes, soft warm lighting, intimate",
            "gentle pull-back revealing isolation, melancholy atmosphere",
            "handheld subtle sway, raw and personal, shallow depth of field",
        ],
    },
    "multi_character": {
        "default": [
            "tracking shot from one character to the other, tension or connection",
            "slow orbit around the group, revealing relationships",
            "alternating focus pull between characters, dialogue rhythm",
        ],
        "epic": [
            "sweeping crane revealing all characters in formation, unity",
            "slow-motion group moment, each face catching light in turn",
        ],
        "confrontation": [
            "slow push-in on the space between characters, growing tension",
            "low-angle alternating between faces, power struggle visible",
            "orbiting shot tightening around the confrontation",
        ],
    },
}

MIN_SCRIPTED_MOTION_LENGTH = 10


def motion_for(kind: str, mood: str = "default", existing: Optional[str] = None, index: int = 0) -> str:
    """
    Camera motion for a scene.

    A motion directive already supplied by the script is kept when it is
    longer than 10 characters. Otherwise one is picked from the library,
    deterministically by scene index.
    """
    if existing and len(existing) > MIN_SCRIPTED_MOTION_LENGTH:
        return existing

    category = MOTION_LIBRARY.get(kind) or MOTION_LIBRARY["establishing"]
    options = (
        category.get((mood or "").lower())
        or category.get("default")
        or MOTION_LIBRARY["establishing"]["default"]
    )
    return options[index % len(options)]
