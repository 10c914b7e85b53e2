"""
Generation Module.

Multi-model text generation with ordered fallback and bounded retry.
"""

from modules.generation.client import (
    GenerationClient,
    classify_provider_error,
    parse_generated_text,
    strip_code_fences,
)
from modules.generation.backends import OpenAICompatibleBackend, TextBackend

__all__ = [
    "GenerationClient",
    "OpenAICompatibleBackend",
    "TextBackend",
    "classify_provider_error",
    "parse_generated_text",
    "strip_code_fences",
]
