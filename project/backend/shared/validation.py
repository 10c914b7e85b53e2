"""
Validation utilities.

Shared validation utilities for common input validation tasks.
"""

import re

from shared.errors import ValidationError

VALID_ASPECT_RATIOS = ("16:9", "9:16", "1:1", "4:3")

_FOLDER_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_\-.]*$")


def validate_topic(
    topic: str,
    min_length: int = 2,
    max_length: int = 500
) -> None:
    """
    Validate a video topic.

    Args:
        topic: Topic string to validate
        min_length: Minimum length in characters (default: 2)
        max_length: Maximum length in characters (default: 500)

    Raises:
        ValidationError: If topic is invalid
    """
    if not topic:
        raise ValidationError("Topic is required")

    if not isinstance(topic, str):
        raise ValidationError("Topic must be a string")

    topic_length = len(topic.strip())

    if topic_length < min_length:
        raise ValidationError(
            f"Topic must be at least {min_length} characters long "
            f"(current: {topic_length})"
        )

    if topic_length > max_length:
        raise ValidationError(
            f"Topic must be at most {max_length} characters long "
            f"(current: {topic_length})"
        )


def validate_aspect_ratio(aspect_ratio: str) -> None:
    """
    Validate an aspect ratio.

    Args:
        aspect_ratio: Aspect ratio such as "16:9"

    Raises:
        ValidationError: If the ratio is not supported
    """
    if aspect_ratio not in VALID_ASPECT_RATIOS:
        raise ValidationError(
            f"Invalid aspect ratio '{aspect_ratio}'. Supported: {', '.join(VALID_ASPECT_RATIOS)}"
        )


def validate_folder_name(folder: str) -> str:
    """
    Validate an operator-supplied project folder name.

    Args:
        folder: Folder name as printed in the director logs

    Returns:
        The stripped folder name

    Raises:
        ValidationError: If the name is empty or could escape the output directory
    """
    if not folder or not folder.strip():
        raise ValidationError("Folder name is required")

    folder = folder.strip()
    if ".." in folder or not _FOLDER_PATTERN.match(folder):
        raise ValidationError(f"Invalid folder name: {folder}")

    return folder
