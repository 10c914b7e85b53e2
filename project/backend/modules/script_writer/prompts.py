"""
Script-writing prompt material.

Retention strategies per niche, the visual style guide, and the system prompt
builder for the script generation call.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel

from shared.models.config import PipelineConfig, StyleDNA


class RetentionStrategy(BaseModel):
    structure_name: str
    hook_strategy: str
    pacing: str
    emotional_arc: str
    retention_rules: List[str]


RETENTION_STRATEGIES: Dict[str, RetentionStrategy] = {
    "Gaming": RetentionStrategy(
        structure_name="The Gameplay Story Arc",
        hook_strategy="Open on the most chaotic or surprising moment, then rewind.",
        pacing="Fast cuts every 3-5 seconds, slow down only for clutch moments.",
        emotional_arc="Hype -> struggle -> comeback -> triumph.",
        retention_rules=[
            "Tease the final outcome in the first 10 seconds.",
            "Introduce a new challenge every 45 seconds.",
            "Use callbacks to earlier fails for payoff.",
        ],
    ),
    "Tech": RetentionStrategy(
        structure_name="The Verdict-First Review",
        hook_strategy="State the surprising verdict or the one flaw nobody mentions.",
        pacing="Steady, information-dense, a visual change every 5-7 seconds.",
        emotional_arc="Curiosity -> scrutiny -> clarity.",
        retention_rules=[
            "Answer 'is it worth it?' early, justify it later.",
            "Compare against a familiar reference product.",
            "Save the strongest demo for the final third.",
        ],
    ),
    "Finance": RetentionStrategy(
        structure_name="The Money Mystery",
        hook_strategy="Lead with a concrete number that feels impossible.",
        pacing="Measured, with a reveal every 60 seconds.",
        emotional_arc="Shock -> understanding -> empowerment.",
        retention_rules=[
            "Make every abstract figure tangible with a comparison.",
            "Pose the next question before answering the current one.",
            "End with one actionable takeaway.",
        ],
    ),
    "Documentary": RetentionStrategy(
        structure_name="The Investigative Narrative",
        hook_strategy="Open with the unanswered question at the heart of the story.",
        pacing="Slow build with escalating revelations.",
        emotional_arc="Intrigue -> unease -> revelation -> reflection.",
        retention_rules=[
            "Plant an open loop in the first minute and close it at the end.",
            "Ground every claim in a specific date, place or person.",
            "Alternate wide context with intimate detail.",
        ],
    ),
    "Horror": RetentionStrategy(
        structure_name="The Slow Dread Spiral",
        hook_strategy="Start with the most disturbing detail, withhold the context.",
        pacing="Slow, deliberate, with sudden sharp beats.",
        emotional_arc="Unease -> dread -> terror -> lingering doubt.",
        retention_rules=[
            "Never fully show the threat until the climax.",
            "Use silence and sound cues as punctuation.",
            "Leave one question unresolved.",
        ],
    ),
    "Health": RetentionStrategy(
        structure_name="The Transformation Path",
        hook_strategy="Show the end result or debunk a common belief.",
        pacing="Clear and even, a new tip every 30-45 seconds.",
        emotional_arc="Frustration -> insight -> motivation.",
        retention_rules=[
            "Address the viewer's likely objection directly.",
            "Back each tip with a simple mechanism.",
            "Close with a routine the viewer can start today.",
        ],
    ),
    "Vlog": RetentionStrategy(
        structure_name="The Day-in-the-Life Journey",
        hook_strategy="Tease the most unexpected moment of the day.",
        pacing="Relaxed with energetic peaks.",
        emotional_arc="Warmth -> anticipation -> payoff.",
        retention_rules=[
            "Keep a running question the viewer wants answered.",
            "Cut dead air ruthlessly.",
            "End on a personal reflection.",
        ],
    ),
    "Universal": RetentionStrategy(
        structure_name="The Universal Retention Loop",
        hook_strategy="Promise a specific payoff in the first 5 seconds.",
        pacing="Pattern interrupt every 20-30 seconds.",
        emotional_arc="Curiosity -> escalation -> payoff.",
        retention_rules=[
            "Open a loop early and close it late.",
            "Escalate stakes in every section.",
            "Deliver on the hook before the outro.",
        ],
    ),
}

# Ordered keyword groups. First group with a substring hit wins.
_STRATEGY_KEYWORDS = [
    (("gam", "play", "minecraft", "roblox"), "Gaming"),
    (("tech", "review", "unbox", "apple"), "Tech"),
    (("money", "financ", "business", "crypto"), "Finance"),
    (("history", "docu", "crime", "mystery"), "Documentary"),
    (("horror", "scary", "creep"), "Horror"),
    (("health", "fit", "workout", "diet"), "Health"),
    (("vlog", "life", "daily"), "Vlog"),
]

VISUAL_STYLE_GUIDE: Dict[str, str] = {
    "2d": "2D animated, vibrant colors, clean vector graphics, motion graphics style, flat design with subtle shadows",
    "anime": "Anime style, Japanese animation aesthetic, expressive characters, dynamic poses, cel-shaded",
    "cinematic": "Cinematic photorealistic, 35mm film, shallow depth of field, dramatic lighting, movie quality",
    "3d": "3D rendered, Pixar-quality animation, smooth textures, volumetric lighting, high-fidelity CGI",
    "documentary": "Documentary style, raw footage aesthetic, natural lighting, handheld camera feel, authentic",
    "horror": "Dark and atmospheric, unsettling imagery, deep shadows, desaturated colors, ominous mood",
    "retro": "Retro aesthetic, vintage film grain, 80s/90s color palette, nostalgic vibe, VHS texture",
}

_COMPOSITION_HINTS = {
    "9:16": "VERTICAL composition: center subjects, portrait framing, ideal for TikTok/Reels/Shorts.",
    "16:9": "HORIZONTAL composition: wide shots, landscape framing, ideal for YouTube.",
    "1:1": "SQUARE composition: centered subjects, balanced framing, ideal for Instagram.",
    "4:3": "CLASSIC composition: centered subjects, TV framing.",
}


def retention_strategy_for(niche: str) -> RetentionStrategy:
    lowered = (niche or "").lower()
    for keywords, name in _STRATEGY_KEYWORDS:
        if any(k in lowered for k in keywords):
            return RETENTION_STRATEGIES[name]
    return RETENTION_STRATEGIES["Universal"]


def style_description_for(visual_style: str) -> str:
    """Partial, case-insensitive match into the style guide. Defaults to cinematic."""
    lowered = (visual_style or "").lower()
    for key, description in VISUAL_STYLE_GUIDE.items():
        if key in lowered:
            return description
    return VISUAL_STYLE_GUIDE["cinematic"]


def _style_dna_section(style_dna: Optional[StyleDNA]) -> str:
    if style_dna is None:
        return ""
    identity = style_dna.visual_identity
    camera = style_dna.cinematography
    constraints = style_dna.constraints
    lines = [
        "## STYLE DNA (LOCKED):",
        f"- Art style: {identity.art_style}",
        f"- Color palette: {identity.color_palette}",
        f"- Lighting: {identity.lighting_setup}",
        f"- Texture: {identity.texture_quality}",
        f"- Lens: {camera.default_lens}; Angle: {camera.default_angle}; Motion: {camera.motion_style}",
    ]
    if constraints.required_keywords:
        lines.append(f"- Every prompt MUST include: {', '.join(constraints.required_keywords)}")
    if constraints.forbidden_keywords:
        lines.append(f"- Prompts must NEVER contain: {', '.join(constraints.forbidden_keywords)}")
    return "\n".join(lines)


SUBJECT_REGISTRY_INSTRUCTIONS = """## SUBJECT REGISTRY (CONSISTENCY):
- List every recurring character, creature or object in "subject_registry":
  {"id": "slug", "name": "...", "type": "character|creature|object",
   "visual_description": "...", "appears_in_scenes": [1, 2], "is_primary": true|false}
- Exactly ONE subject is primary.
- Each scene has "scene_type": "character" | "establishing" | "multi_character".
  character scenes set "subject_id"; multi_character scenes also set
  "secondary_subject_id"; establishing scenes reference no subject."""


def build_script_prompt(config: PipelineConfig) -> str:
    """
    Build the script-writing system prompt.

    Args:
        config: Locked production settings

    Returns:
        System prompt text
    """
    strategy = retention_strategy_for(config.niche)
    rules = "\n".join(f"{i + 1}. {rule}" for i, rule in enumerate(strategy.retention_rules))
    composition = _COMPOSITION_HINTS.get(config.aspect_ratio, "")

    return f"""You are a World-Class YouTube Scriptwriter, Cinematic Director, and Retention Expert.
You specialize in the '{config.niche}' niche and assume the archetype of: {strategy.structure_name}.

## VISUAL STYLE (CRITICAL):
ALL video_prompts MUST use this visual style: {config.visual_style}
Style Guide: {style_description_for(config.visual_style)}

## ASPECT RATIO (CRITICAL):
Add "--ar {config.aspect_ratio}" to EVERY image_prompt and video_prompt.
{composition}

## PLATFORM: {config.platform}
## MOOD/TONE: {config.mood}

## CORE ARCHITECTURE: {strategy.structure_name}
HOOK STRATEGY: {strategy.hook_strategy}
PACING RULE: {strategy.pacing}
EMOTIONAL ARC: {strategy.emotional_arc}

## RETENTION RULES:
{rules}

{_style_dna_section(config.style_dna)}

{SUBJECT_REGISTRY_INSTRUCTIONS}

USER INPUT:
- Topic: "{config.topic}"
- Target Length: {config.video_length}
- Voice: {config.voice_style}

Provide 1-2 placeholder video_prompts per scene; exact visuals are generated
after the audio duration is known.

RETURN JSON ONLY:
{{
  "structure": [
    {{
      "section": "THE HOOK",
      "scene_type": "establishing",
      "subject_id": null,
      "voiceover": "Script lines...",
      "image_prompt": "... --ar {config.aspect_ratio}",
      "video_prompts": ["Shot 1 ...", "Shot 2 ..."],
      "motion_prompt": "optional camera movement"
    }}
  ],
  "subject_registry": [],
  "title_options": ["Title 1", "Title 2", "Title 3"]
}}
"""
