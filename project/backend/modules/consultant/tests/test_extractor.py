"""
Unit tests for consultant reply extraction and voice selection.
"""

from modules.consultant.extractor import extract
from modules.consultant.voices import DEFAULT_VOICE, voice_for_niche, voice_for_style


class TestExtract:
    """Test config extraction from free-form replies."""

    def test_fenced_block(self):
        """Fenced JSON is extracted and removed from the display text."""
        text = 'All set!\n```json\n{"ready": true, "topic": "Mars"}\n```'
        display, config = extract(text)

        assert display == "All set!"
        assert config == {"ready": True, "topic": "Mars"}

    def test_inline_nested_object(self):
        """Brace depth is tracked so nested objects stay intact."""
        text = (
            'Great, locking it in. {"ready": true, "niche": "horror", '
            '"style_dna": {"camera": {"lens": "35mm"}}} Enjoy!'
        )
        display, config = extract(text)

        assert config["style_dna"] == {"camera": {"lens": "35mm"}}
        assert "{" not in display
        assert display.startswith("Great, locking it in.")
        assert display.endswith("Enjoy!")

    def test_braces_inside_strings(self):
        """Braces inside string values do not end the object early."""
        text = '{"ready": false, "topic": "the {weird} case \\"quoted\\""}'
        display, config = extract(text)

        assert display == ""
        assert config["topic"] == 'the {weird} case "quoted"'

    def test_no_marker_returns_original(self):
        text = "What niche are you aiming for?"
        assert extract(text) == (text, None)

    def test_malformed_returns_original(self):
        """Parse failures keep the original text and never raise."""
        text = 'Here: {"ready": true, "topic": }'
        assert extract(text) == (text, None)

    def test_unterminated_returns_original(self):
        text = 'Here: {"ready": true, "topic": "x"'
        assert extract(text) == (text, None)

    def test_voice_enrichment(self):
        """Configs with a niche get voice fields."""
        _, config = extract('{"ready": true, "niche": "Horror Stories"}')

        assert config["voiceId"] == "en_US-ryan-medium"
        assert config["voiceGender"] == "male"
        assert config["voiceDescription"] == "Deep dramatic voice for horror/drama"

    def test_no_niche_no_enrichment(self):
        _, config = extract('{"ready": false}')
        assert "voiceId" not in config


class TestVoiceSelection:
    """Test niche and style voice mapping."""

    def test_niche_case_insensitive(self):
        assert voice_for_niche("TECH reviews").id == "en_US-lessac-medium"
        assert voice_for_niche("Health & Fitness").id == "en_US-amy-medium"

    def test_first_match_wins(self):
        """'history documentary' hits documentary before history."""
        voice = voice_for_niche("history documentary")
        assert voice.description == "Serious narrator for documentaries"

    def test_unknown_niche_defaults(self):
        assert voice_for_niche("cooking") == DEFAULT_VOICE
        assert voice_for_niche("") == DEFAULT_VOICE

    def test_voice_for_style(self):
        assert voice_for_style("Deep male narrator").id == "en_US-ryan-medium"
        assert voice_for_style("Friendly female").id == "en_US-joe-medium"
        assert voice_for_style("Conversational").id == "en_US-lessac-medium"
