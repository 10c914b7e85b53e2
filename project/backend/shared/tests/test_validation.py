"""
Tests for validation utilities.
"""

import pytest
from shared.validation import (
    validate_aspect_ratio,
    validate_folder_name,
    validate_topic
)
from shared.errors import ValidationError


def test_validate_topic_valid():
    """Test validation of valid topic."""
    # Should not raise
    validate_topic("The history of lighthouses")


def test_validate_topic_empty():
    with pytest.raises(ValidationError) as exc_info:
        validate_topic("")

    assert "required" in str(exc_info.value).lower()


def test_validate_topic_too_short():
    """Whitespace does not count towards the length."""
    with pytest.raises(ValidationError) as exc_info:
        validate_topic("  a  ")

    assert "at least 2" in str(exc_info.value)


def test_validate_topic_too_long():
    with pytest.raises(ValidationError):
        validate_topic("A" * 501)


@pytest.mark.parametrize("ratio", ["16:9", "9:16", "1:1", "4:3"])
def test_validate_aspect_ratio_valid(ratio):
    validate_aspect_ratio(ratio)


def test_validate_aspect_ratio_invalid():
    with pytest.raises(ValidationError) as exc_info:
        validate_aspect_ratio("21:9")

    assert "21:9" in str(exc_info.value)


def test_validate_folder_name_strips():
    assert validate_folder_name("  reel_2024-01.v2 ") == "reel_2024-01.v2"


@pytest.mark.parametrize("folder", ["", "   ", "../secrets", "a/b", "a\\b", ".hidden", "reel..x"])
def test_validate_folder_name_rejects(folder):
    """Test that unsafe or empty folder names are rejected."""
    with pytest.raises(ValidationError):
        validate_folder_name(folder)
