"""
Script Writer Module.

Script generation, scene classification and camera motion assignment.
"""

from modules.script_writer.writer import ScriptResult, ScriptWriter, parse_script, slugify_title
from modules.script_writer.classifier import classify, validate_registry
from modules.script_writer.motion import motion_for
from modules.script_writer.prompts import build_script_prompt, retention_strategy_for, style_description_for

__all__ = [
    "ScriptResult",
    "ScriptWriter",
    "parse_script",
    "slugify_title",
    "classify",
    "validate_registry",
    "motion_for",
    "build_script_prompt",
    "retention_strategy_for",
    "style_description_for",
]
