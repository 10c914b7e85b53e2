"""
Unit tests for scene classification and the camera motion library.
"""

import pytest

from modules.script_writer.classifier import classify, coerce_text, validate_registry
from modules.script_writer.motion import MOTION_LIBRARY, motion_for
from shared.models.scene import SceneKind, SubjectRegistryEntry


@pytest.fixture
def registry():
    return [
        SubjectRegistryEntry(id="keeper", name="The Keeper", is_primary=True),
        SubjectRegistryEntry(id="ghost", name="Ghost", kind="creature"),
    ]


class TestClassify:
    """Test scene kind resolution."""

    def test_missing_label_is_establishing(self, registry):
        kind, issues = classify({"voiceover": "..."}, registry)
        assert kind == SceneKind.ESTABLISHING
        assert issues == []

    def test_unknown_label_is_establishing_with_issue(self, registry):
        kind, issues = classify({"scene_type": "action"}, registry)
        assert kind == SceneKind.ESTABLISHING
        assert len(issues) == 1

    def test_character_with_known_subject(self, registry):
        kind, issues = classify({"scene_type": "Character", "subject_id": "keeper"}, registry)
        assert kind == SceneKind.CHARACTER
        assert issues == []

    def test_character_with_unknown_subject_keeps_label(self, registry):
        """Unresolvable subjects are reported, not reclassified."""
        kind, issues = classify({"scene_type": "character", "subject_id": "sailor"}, registry)
        assert kind == SceneKind.CHARACTER
        assert "sailor" in issues[0].message
        assert issues[0].code == "UNKNOWN_SUBJECT"

    def test_multi_character_needs_secondary(self, registry):
        kind, issues = classify(
            {"scene_type": "multi_character", "subject_id": "keeper"},
            registry
        )
        assert kind == SceneKind.MULTI_CHARACTER
        assert len(issues) == 1

    def test_establishing_with_subject_is_flagged(self, registry):
        _, issues = classify({"scene_type": "establishing", "subject_id": "keeper"}, registry)
        assert [issue.message for issue in issues] == ["establishing scene references a subject"]

    def test_numeric_subject_id_matches_registry(self):
        """Scalar ids are compared as strings."""
        kind, issues = classify(
            {"scene_type": "character", "subject_id": 7},
            [SubjectRegistryEntry(id="7", name="Agent Seven", is_primary=True)]
        )
        assert kind == SceneKind.CHARACTER
        assert issues == []

    def test_structured_subject_id_is_reported(self, registry):
        kind, issues = classify({"scene_type": "character", "subject_id": ["keeper"]}, registry)
        assert kind == SceneKind.CHARACTER
        assert [issue.code for issue in issues] == ["BAD_SUBJECT_REF", "UNKNOWN_SUBJECT"]

    def test_non_string_label(self, registry):
        kind, issues = classify({"scene_type": 3}, registry)
        assert kind == SceneKind.ESTABLISHING
        assert issues[0].code == "UNKNOWN_SCENE_TYPE"


@pytest.mark.parametrize("value, expected", [
    ("  keeper ", "keeper"),
    (7, "7"),
    (2.5, "2.5"),
    ("", None),
    (None, None),
    (True, None),
    (["keeper"], None),
    ({"id": "keeper"}, None),
])
def test_coerce_text(value, expected):
    assert coerce_text(value) == expected


class TestValidateRegistry:
    """Test registry data-quality checks."""

    def test_valid_registry(self, registry):
        assert validate_registry(registry) == []

    def test_no_primary(self):
        issues = validate_registry([SubjectRegistryEntry(id="a"), SubjectRegistryEntry(id="b")])
        assert [issue.message for issue in issues] == ["expected exactly one primary subject, found 0"]

    def test_duplicate_ids(self):
        issues = validate_registry([
            SubjectRegistryEntry(id="a", is_primary=True),
            SubjectRegistryEntry(id="a"),
        ])
        assert any(issue.code == "DUPLICATE_SUBJECT" for issue in issues)

    def test_empty_registry_is_fine(self):
        assert validate_registry([]) == []


class TestMotionFor:
    """Test camera motion selection."""

    def test_keeps_scripted_motion(self):
        scripted = "slow push-in through the lantern room"
        assert motion_for("character", "dark", scripted) == scripted

    def test_short_scripted_motion_is_replaced(self):
        assert motion_for("character", "dark", "zoom", 0) == MOTION_LIBRARY["character"]["dark"][0]

    def test_deterministic_by_index(self):
        options = MOTION_LIBRARY["establishing"]["default"]
        assert motion_for("establishing", "cinematic", None, 7) == options[7 % len(options)]

    def test_unknown_kind_falls_back_to_establishing(self):
        assert motion_for("montage", "epic", None, 0) == MOTION_LIBRARY["establishing"]["epic"][0]

    def test_mood_is_case_insensitive(self):
        assert motion_for("establishing", "Dark") == MOTION_LIBRARY["establishing"]["dark"][0]

    def test_unknown_mood_uses_kind_default(self):
        assert motion_for("multi_character", "whimsical") == MOTION_LIBRARY["multi_character"]["default"][0]
