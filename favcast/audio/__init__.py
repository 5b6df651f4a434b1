"""Speech synthesis and audio assembly."""

from .audio_stitcher import (
    AudioConcatenator,
    ConcatenationError,
    NothingToConcatenateError,
    add_jingles,
    get_or_create_jingle,
    probe_duration,
)
from .tts_generator import (
    ElevenLabsSpeechClient,
    EmptyScriptError,
    SpeechClient,
    SpeechSynthesisDriver,
    SpeechSynthesisError,
    VoiceQuotaError,
)

__all__ = [
    "AudioConcatenator",
    "ConcatenationError",
    "NothingToConcatenateError",
    "add_jingles",
    "get_or_create_jingle",
    "probe_duration",
    "ElevenLabsSpeechClient",
    "EmptyScriptError",
    "SpeechClient",
    "SpeechSynthesisDriver",
    "SpeechSynthesisError",
    "VoiceQuotaError",
]
