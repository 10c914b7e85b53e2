"""
Scene classification.

Validates the scene kind the script generator assigned against the subject
registry. Inconsistencies are reported as data-quality issues and never stop
the job.
"""

from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

from shared.errors import DataQualityError
from shared.logging import get_logger, log_data_quality
from shared.models.scene import SceneKind, SubjectRegistryEntry

logger = get_logger("script_writer")

_SUBJECT_KINDS = (SceneKind.CHARACTER, SceneKind.MULTI_CHARACTER)


def coerce_text(value: Any) -> Optional[str]:
    """
    Scalar model output as a stripped string.

    Returns:
        None for missing, empty, boolean or structured (list/dict) values
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (str, int, float)):
        return str(value).strip() or None
    return None


def _subject_ref(
    scene: Dict[str, Any],
    key: str,
    issues: List[DataQualityError]
) -> Optional[str]:
    raw = scene.get(key)
    subject_id = coerce_text(raw)
    if subject_id is None and raw not in (None, "") and not isinstance(raw, str):
        issues.append(DataQualityError(f"unusable {key} value {raw!r}, ignoring", code="BAD_SUBJECT_REF"))
    return subject_id


def classify(
    scene: Dict[str, Any],
    registry: Sequence[SubjectRegistryEntry]
) -> Tuple[SceneKind, List[DataQualityError]]:
    """
    Resolve the kind of one raw scene.

    Args:
        scene: Raw scene dict from the script generator
        registry: Parsed subject registry

    Returns:
        (kind, issues). Missing or unknown labels resolve to establishing.
    """
    issues: List[DataQualityError] = []
    registry_ids = {entry.id for entry in registry}
    label = coerce_text(scene.get("scene_type")) or coerce_text(scene.get("kind"))
    subject_id = _subject_ref(scene, "subject_id", issues)
    secondary_id = _subject_ref(scene, "secondary_subject_id", issues)

    if not label:
        kind = SceneKind.ESTABLISHING
    else:
        try:
            kind = SceneKind(label.lower())
        except ValueError:
            issues.append(DataQualityError(
                f"unknown scene_type '{label}', treating as establishing",
                code="UNKNOWN_SCENE_TYPE"
            ))
            kind = SceneKind.ESTABLISHING

    if kind in _SUBJECT_KINDS and subject_id not in registry_ids:
        issues.append(DataQualityError(
            f"{kind.value} scene references unknown subject '{subject_id}'",
            code="UNKNOWN_SUBJECT"
        ))
    if kind == SceneKind.MULTI_CHARACTER and secondary_id not in registry_ids:
        issues.append(DataQualityError(
            f"multi_character scene references unknown secondary subject '{secondary_id}'",
            code="UNKNOWN_SUBJECT"
        ))
    if kind == SceneKind.ESTABLISHING and (subject_id or secondary_id):
        issues.append(DataQualityError("establishing scene references a subject", code="UNEXPECTED_SUBJECT"))

    return kind, issues


def validate_registry(registry: Sequence[SubjectRegistryEntry]) -> List[DataQualityError]:
    """Duplicate ids and a primary count other than one are data-quality issues."""
    issues: List[DataQualityError] = []
    counts = Counter(entry.id for entry in registry)
    for subject_id, count in counts.items():
        if count > 1:
            issues.append(DataQualityError(
                f"duplicate subject id '{subject_id}' ({count} entries)",
                code="DUPLICATE_SUBJECT"
            ))

    if registry:
        primaries = sum(1 for entry in registry if entry.is_primary)
        if primaries != 1:
            issues.append(DataQualityError(
                f"expected exactly one primary subject, found {primaries}",
                code="PRIMARY_COUNT"
            ))

    for issue in issues:
        log_data_quality(logger, issue, component="subject_registry")
    return issues
