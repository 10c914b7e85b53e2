"""
Consultant Module.

Conversational parameter gathering, config extraction and voice selection.
"""

from modules.consultant.consultant import ConsultantReply, consult_with_user
from modules.consultant.extractor import extract
from modules.consultant.voices import DEFAULT_VOICE, voice_for_niche, voice_for_style

__all__ = [
    "ConsultantReply",
    "consult_with_user",
    "extract",
    "DEFAULT_VOICE",
    "voice_for_niche",
    "voice_for_style",
]
