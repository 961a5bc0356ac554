"""Services module - provides external service integrations."""

from .transcription import (
    TranscriptionService, TranscriptionError, detect_audio_format, get_transcription_service,
)
from .speech import SpeechSynthesisService, SpeechSynthesisError, get_speech_service
from .outline_generator import CourseOutlineGenerator, OutlineGenerationError

__all__ = [
    'TranscriptionService', 'TranscriptionError', 'detect_audio_format', 'get_transcription_service',
    'SpeechSynthesisService', 'SpeechSynthesisError', 'get_speech_service',
    'CourseOutlineGenerator', 'OutlineGenerationError',
]
