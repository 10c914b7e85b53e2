"""
Unit tests for script generation and parsing.
"""

import pytest
from unittest.mock import AsyncMock, Mock

from modules.script_writer.prompts import build_script_prompt, retention_strategy_for, style_description_for
from modules.script_writer.writer import ScriptWriter, parse_script, slugify_title
from shared.errors import StructuralError
from shared.models.config import PipelineConfig, StyleConstraints, StyleDNA
from shared.models.scene import SceneKind


@pytest.fixture
def config():
    return PipelineConfig(topic="The Lighthouse at Dusk", niche="horror", visualStyle="Anime", mood="Dark")


@pytest.fixture
def script_payload():
    return {
        "structure": [
            {
                "section": "THE HOOK",
                "scene_type": "establishing",
                "voiceover": "Nobody has lit the lamp in forty years.",
                "video_prompts": ["Wide shot of a lighthouse --ar 16:9"],
            },
            {
                "section": "THE CONTEXT",
                "scene_type": "character",
                "subject_id": "keeper",
                "voiceover": "Except for him.",
                "video_prompts": [],
                "motion_prompt": "slow push-in on the keeper's weathered face",
            },
        ],
        "subject_registry": [
            {"id": "keeper", "name": "The Keeper", "type": "character", "is_primary": True},
            {"name": "missing id"},
        ],
        "title_options": ["The Keeper's Last Light!", "Alt"],
    }


class TestParseScript:
    """Test script reply parsing."""

    def test_scenes_and_registry(self, script_payload, config):
        script = parse_script(script_payload, config)

        assert [scene.index for scene in script.scenes] == [1, 2]
        assert script.scenes[1].kind == SceneKind.CHARACTER
        assert script.scenes[1].camera_motion == "slow push-in on the keeper's weathered face"
        assert script.scenes[0].camera_motion  # filled from the library
        # Malformed registry entry skipped
        assert [entry.id for entry in script.subject_registry] == ["keeper"]

    def test_title_slug(self, script_payload, config):
        script = parse_script(script_payload, config)
        assert script.title == "the_keeper_s_last_light_"

    def test_title_falls_back_to_topic(self, script_payload, config):
        del script_payload["title_options"]
        assert parse_script(script_payload, config).title == "the_lighthouse_at_dusk"

    def test_missing_structure_raises(self, config):
        with pytest.raises(StructuralError):
            parse_script({"title_options": ["x"]}, config)

    def test_empty_structure_raises(self, config):
        with pytest.raises(StructuralError):
            parse_script({"structure": []}, config)

    def test_text_reply_raises(self, config):
        with pytest.raises(StructuralError):
            parse_script("Sorry, I can't help with that.", config)

    def test_non_string_fields_are_coerced(self, config):
        """Numeric ids and structured prompts degrade the scene instead of failing the script."""
        script = parse_script({
            "structure": [
                {
                    "section": 1,
                    "scene_type": "character",
                    "subject_id": 7,
                    "secondary_subject_id": {"id": "ghost"},
                    "image_prompt": ["not", "a", "string"],
                    "motion_prompt": 42,
                    "voiceover": "Agent Seven waits.",
                },
            ],
            "subject_registry": [{"id": 7, "name": "Agent Seven", "is_primary": True}],
            "title_options": [None],
        }, config)

        scene = script.scenes[0]
        assert scene.kind == SceneKind.CHARACTER
        assert scene.section == "1"
        assert scene.subject_id == "7"
        assert scene.secondary_subject_id is None
        assert scene.image_prompt is None
        assert scene.camera_motion  # short scripted motion replaced from the library
        assert [entry.id for entry in script.subject_registry] == ["7"]
        assert script.title == "the_lighthouse_at_dusk"

    def test_slugify_default(self):
        assert slugify_title(None) == "video_project"


class TestPrompts:
    """Test prompt material selection."""

    @pytest.mark.parametrize("niche,expected", [
        ("Minecraft builds", "Gaming"),
        ("crypto news", "Finance"),
        ("true crime", "Documentary"),
        ("creepypasta", "Horror"),
        ("cooking", "Universal"),
    ])
    def test_retention_strategy(self, niche, expected):
        from modules.script_writer.prompts import RETENTION_STRATEGIES
        assert retention_strategy_for(niche) == RETENTION_STRATEGIES[expected]

    def test_style_guide_partial_match(self):
        assert style_description_for("Retro 80s").startswith("Retro aesthetic")
        assert style_description_for("watercolor").startswith("Cinematic photorealistic")

    def test_prompt_carries_constraints(self):
        config = PipelineConfig(
            topic="x",
            aspectRatio="9:16",
            style_dna=StyleDNA(constraints=StyleConstraints(forbidden_keywords=["photorealistic"]))
        )
        prompt = build_script_prompt(config)
        assert "--ar 9:16" in prompt
        assert "VERTICAL" in prompt
        assert "NEVER contain: photorealistic" in prompt


class TestScriptWriter:
    """Test the generation call."""

    @pytest.mark.asyncio
    async def test_generate_uses_topic_query(self, script_payload, config):
        client = Mock()
        client.generate = AsyncMock(return_value=script_payload)

        script = await ScriptWriter(client).generate(config)

        assert len(script.scenes) == 2
        _, user_query = client.generate.await_args.args
        assert user_query == 'Create a script for: "The Lighthouse at Dusk"'
