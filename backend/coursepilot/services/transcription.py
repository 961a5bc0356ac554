"""
Speech-to-Text Transcription Service using OpenAI Whisper API.
"""

import logging
from typing import Optional, Tuple
from openai import AsyncOpenAI

from ..config import settings

logger = logging.getLogger(__name__)

DEFAULT_AUDIO_FORMAT = ("audio.webm", "audio/webm")

# Leading hex of the first bytes -> (filename, MIME type)
AUDIO_SIGNATURES = (
    (("5249", "7761"), ("audio.wav", "audio/wav")),   # "RI"FF / "wa"ve
    (("6674",), ("audio.mp4", "audio/mp4")),          # "ft"yp (ISO-BMFF)
    (("4f67",), ("audio.ogg", "audio/ogg")),          # "Og"gS
)


class TranscriptionError(Exception):
    """Raised when audio cannot be transcribed."""


def detect_audio_format(audio_data: bytes) -> Tuple[str, str]:
    """
    Pick a filename and MIME type for an audio buffer from its leading bytes.

    Whisper infers the container from the filename, so browsers' MediaRecorder
    output (usually WebM) is the fallback when no signature matches.

    Returns:
        (filename, mime_type)
    """
    header = audio_data[:4].hex()
    for prefixes, audio_format in AUDIO_SIGNATURES:
        if header.startswith(prefixes):
            return audio_format
    return DEFAULT_AUDIO_FORMAT


class TranscriptionService:
    """
    Service for transcribing audio to text using OpenAI Whisper API.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        language: Optional[str] = None,
    ):
        """
        Initialize transcription service.

        Args:
            api_key: OpenAI API key. If not provided, uses settings.openai_api_key
            model: Whisper model name, defaults to settings.transcription_model
            language: ISO 639-1 hint, defaults to settings.transcription_language
        """
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.transcription_model
        self.language = language or settings.transcription_language
        if self.api_key:
            self.client = AsyncOpenAI(api_key=self.api_key)
        else:
            self.client = None

    async def transcribe_audio(
        self,
        audio_data: bytes,
        filename: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> str:
        """
        Transcribe an audio buffer to plain text.

        Args:
            audio_data: Raw audio bytes
            filename: Container hint; sniffed from the bytes when omitted
            mime_type: MIME hint matching filename

        Returns:
            Transcribed text (may be empty when nothing was said)

        Raises:
            TranscriptionError: If the service is not configured or the API call fails
        """
        if not self.client:
            raise TranscriptionError(
                "OpenAI API key not configured. Please set OPENAI_API_KEY in environment variables."
            )

        if filename is None or mime_type is None:
            filename, mime_type = detect_audio_format(audio_data)

        logger.info(f"Transcribing audio: {filename}, size: {len(audio_data)} bytes")

        try:
            transcription = await self.client.audio.transcriptions.create(
                model=self.model,
                file=(filename, audio_data, mime_type),
                language=self.language,
                response_format="text",
            )
        except Exception as e:
            raise TranscriptionError(f"Transcription failed: {str(e)}") from e

        # response_format="text" yields a bare string
        if isinstance(transcription, str):
            return transcription
        return getattr(transcription, "text", "") or ""

    def is_configured(self) -> bool:
        """
        Check if the transcription service is properly configured.

        Returns:
            bool: True if API key is set, False otherwise
        """
        return self.client is not None


# Global transcription service instance
_transcription_service: Optional[TranscriptionService] = None


def get_transcription_service() -> TranscriptionService:
    """
    Get the global transcription service instance.

    Returns:
        TranscriptionService: Global transcription service
    """
    global _transcription_service
    if _transcription_service is None:
        _transcription_service = TranscriptionService()
    return _transcription_service
