"""
Text-to-Speech Service using the OpenAI speech API.
"""

import base64
import logging
import time
from typing import Optional
from openai import AsyncOpenAI

from ..config import settings

logger = logging.getLogger(__name__)


class SpeechSynthesisError(Exception):
    """Raised when text cannot be turned into audio."""


class SpeechSynthesisService:
    """
    Service for synthesizing spoken replies.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        voice: Optional[str] = None,
        response_format: Optional[str] = None,
    ):
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.tts_model
        self.voice = voice or settings.tts_voice
        self.response_format = response_format or settings.tts_format
        if self.api_key:
            self.client = AsyncOpenAI(api_key=self.api_key)
        else:
            self.client = None

    async def synthesize(self, text: str) -> bytes:
        """
        Convert text to audio bytes.

        Raises:
            SpeechSynthesisError: If the service is not configured or the API call fails
        """
        if not self.client:
            raise SpeechSynthesisError(
                "OpenAI API key not configured. Please set OPENAI_API_KEY in environment variables."
            )

        start_time = time.time()
        try:
            response = await self.client.audio.speech.create(
                model=self.model,
                voice=self.voice,
                input=text,
                response_format=self.response_format,
            )
            audio = response.content
        except Exception as e:
            raise SpeechSynthesisError(f"Speech synthesis failed: {str(e)}") from e

        logger.debug(
            f"Speech synthesized: {len(text)} chars -> {len(audio)} bytes "
            f"in {(time.time() - start_time) * 1000:.0f}ms"
        )
        return audio

    async def synthesize_base64(self, text: str) -> str:
        """Synthesize and return the audio as a base64 string for JSON transport."""
        audio = await self.synthesize(text)
        return base64.b64encode(audio).decode("ascii")

    def is_configured(self) -> bool:
        return self.client is not None


_speech_service: Optional[SpeechSynthesisService] = None


def get_speech_service() -> SpeechSynthesisService:
    """Get the global speech synthesis service instance."""
    global _speech_service
    if _speech_service is None:
        _speech_service = SpeechSynthesisService()
    return _speech_service
