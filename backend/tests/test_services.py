"""
Unit tests for the speech, transcription and outline generation services.
"""

import base64
import json
import pytest
from unittest.mock import AsyncMock, MagicMock

from coursepilot.llm.base import LLMProvider, LLMResponse
from coursepilot.models.course import CourseGenerationRequest
from coursepilot.services.outline_generator import (
    CourseOutlineGenerator, OutlineGenerationError, build_outline_prompt, parse_outline,
)
from coursepilot.services.speech import SpeechSynthesisError, SpeechSynthesisService
from coursepilot.services.transcription import (
    TranscriptionError, TranscriptionService, detect_audio_format,
)


OUTLINE_JSON = {
    "title": "Sourdough at Home",
    "description": "Bake reliable loaves.",
    "targetAudience": "Hobby bakers",
    "totalDuration": "3 hours",
    "courseType": "Workshop",
    "learningObjectives": ["Maintain a starter"],
    "modules": [
        {
            "title": "Starter Care",
            "learningObjectives": ["Feed on schedule"],
            "lessons": [{"title": "Feeding", "duration": "20 min", "format": ["Video"]}],
            "activities": [{"type": "Quiz", "title": "Hydration check", "description": ""}],
        },
        {"title": "Shaping", "lessons": []},
    ],
}


class TestDetectAudioFormat:

    @pytest.mark.parametrize("header, expected", [
        (b"RIFF\x00\x00", ("audio.wav", "audio/wav")),
        (b"wave", ("audio.wav", "audio/wav")),
        (b"ftypisom", ("audio.mp4", "audio/mp4")),
        (b"OggS\x00", ("audio.ogg", "audio/ogg")),
        (b"\x1a\x45\xdf\xa3", ("audio.webm", "audio/webm")),
        (b"", ("audio.webm", "audio/webm")),
    ])
    def test_signatures(self, header, expected):
        assert detect_audio_format(header) == expected


class TestTranscriptionService:

    def test_not_configured(self):
        service = TranscriptionService(api_key="")
        assert not service.is_configured()

    @pytest.mark.asyncio
    async def test_not_configured_raises(self):
        service = TranscriptionService(api_key="")
        with pytest.raises(TranscriptionError, match="not configured"):
            await service.transcribe_audio(b"RIFF")

    @pytest.mark.asyncio
    async def test_transcribe_sniffs_format(self):
        service = TranscriptionService(api_key="sk-test")
        service.client = MagicMock()
        service.client.audio.transcriptions.create = AsyncMock(return_value="Hello world\n")

        result = await service.transcribe_audio(b"OggS\x00\x02")

        assert result == "Hello world\n"
        kwargs = service.client.audio.transcriptions.create.call_args.kwargs
        assert kwargs["model"] == "whisper-1"
        assert kwargs["language"] == "en"
        assert kwargs["response_format"] == "text"
        assert kwargs["file"] == ("audio.ogg", b"OggS\x00\x02", "audio/ogg")

    @pytest.mark.asyncio
    async def test_transcribe_wraps_api_errors(self):
        service = TranscriptionService(api_key="sk-test")
        service.client = MagicMock()
        service.client.audio.transcriptions.create = AsyncMock(side_effect=Exception("400 bad audio"))

        with pytest.raises(TranscriptionError, match="400 bad audio"):
            await service.transcribe_audio(b"RIFF", "audio.wav", "audio/wav")


class TestSpeechSynthesisService:

    @pytest.mark.asyncio
    async def test_not_configured_raises(self):
        service = SpeechSynthesisService(api_key="")
        assert not service.is_configured()
        with pytest.raises(SpeechSynthesisError):
            await service.synthesize("Hello")

    @pytest.mark.asyncio
    async def test_synthesize_base64(self):
        service = SpeechSynthesisService(api_key="sk-test")
        service.client = MagicMock()
        service.client.audio.speech.create = AsyncMock(return_value=MagicMock(content=b"RIFFdata"))

        result = await service.synthesize_base64("Welcome back")

        assert base64.b64decode(result) == b"RIFFdata"
        kwargs = service.client.audio.speech.create.call_args.kwargs
        assert kwargs == {
            "model": "tts-1",
            "voice": "alloy",
            "input": "Welcome back",
            "response_format": "wav",
        }

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self):
        service = SpeechSynthesisService(api_key="sk-test")
        service.client = MagicMock()
        service.client.audio.speech.create = AsyncMock(side_effect=Exception("quota"))

        with pytest.raises(SpeechSynthesisError, match="quota"):
            await service.synthesize("Hello")


class TestOutlinePrompt:

    def test_includes_optional_fields(self):
        request = CourseGenerationRequest(
            description="A course about baking bread at home",
            title="Bread Basics",
            target_audience="Beginners",
            duration="2 hours",
            course_type="Workshop",
        )
        prompt = build_outline_prompt(request)

        assert "A course about baking bread at home" in prompt
        assert "Preferred title: Bread Basics" in prompt
        assert "Target audience: Beginners" in prompt
        assert "Preferred duration: 2 hours" in prompt
        assert "Course type: Workshop" in prompt

    def test_omits_missing_fields(self):
        prompt = build_outline_prompt(CourseGenerationRequest(description="A course about baking"))
        assert "Preferred title" not in prompt
        assert "Target audience" not in prompt


class TestParseOutline:

    def test_valid(self):
        outline = parse_outline(json.dumps(OUTLINE_JSON))
        assert outline.title == "Sourdough at Home"
        assert outline.target_audience == "Hobby bakers"
        assert outline.modules[0].learning_objectives == ["Feed on schedule"]
        assert outline.lesson_count == 1

    @pytest.mark.parametrize("raw", [
        "not json",
        "[]",
        json.dumps({"title": "No modules"}),
        json.dumps({"modules": [{"title": "x"}]}),
        json.dumps({"title": "Empty", "modules": []}),
        "",
    ])
    def test_invalid(self, raw):
        with pytest.raises(OutlineGenerationError):
            parse_outline(raw)


class TestCourseOutlineGenerator:

    @pytest.mark.asyncio
    async def test_generate(self):
        provider = AsyncMock(spec=LLMProvider)
        provider.chat_completion.return_value = LLMResponse(content=json.dumps(OUTLINE_JSON))
        generator = CourseOutlineGenerator(provider)

        outline = await generator.generate(CourseGenerationRequest(description="Sourdough for beginners"))

        assert outline.title == "Sourdough at Home"
        messages = provider.chat_completion.call_args[0][0]
        assert messages[0].role == "system"
        assert messages[1].role == "user"
        kwargs = provider.chat_completion.call_args.kwargs
        assert kwargs["json_mode"] is True
        assert kwargs["max_tokens"] == 4000
        assert kwargs["temperature"] == 0.7

    @pytest.mark.asyncio
    async def test_invalid_reply(self):
        provider = AsyncMock(spec=LLMProvider)
        provider.chat_completion.return_value = LLMResponse(content='{"title": "x"}')
        generator = CourseOutlineGenerator(provider)

        with pytest.raises(OutlineGenerationError, match="Failed to generate course outline"):
            await generator.generate(CourseGenerationRequest(description="Sourdough for beginners"))

    @pytest.mark.asyncio
    async def test_provider_error(self):
        provider = AsyncMock(spec=LLMProvider)
        provider.chat_completion.side_effect = Exception("timeout")
        generator = CourseOutlineGenerator(provider)

        with pytest.raises(OutlineGenerationError, match="timeout"):
            await generator.generate(CourseGenerationRequest(description="Sourdough for beginners"))

    @pytest.mark.asyncio
    async def test_without_provider(self):
        generator = CourseOutlineGenerator(None)

        with pytest.raises(OutlineGenerationError, match="LLM not configured"):
            await generator.generate(CourseGenerationRequest(description="Sourdough for beginners"))


class TestEnhanceSection:

    @pytest.mark.asyncio
    async def test_enhance(self):
        provider = AsyncMock(spec=LLMProvider)
        provider.chat_completion.return_value = LLMResponse(content="Richer section")
        generator = CourseOutlineGenerator(provider)

        result = await generator.enhance_section("Module 1: Starter Care", "Beginner bread course")

        assert result == "Richer section"
        messages = provider.chat_completion.call_args[0][0]
        assert messages[0].role == "system"
        assert messages[1].content.startswith("Context: Beginner bread course\n\nSection to enhance:\nModule 1")
        kwargs = provider.chat_completion.call_args.kwargs
        assert kwargs["temperature"] == 0.6
        assert kwargs["max_tokens"] == 1500

    @pytest.mark.asyncio
    async def test_empty_reply_keeps_section(self):
        provider = AsyncMock(spec=LLMProvider)
        provider.chat_completion.return_value = LLMResponse(content="")
        generator = CourseOutlineGenerator(provider)

        assert await generator.enhance_section("Module 1") == "Module 1"

    @pytest.mark.asyncio
    async def test_provider_error(self):
        provider = AsyncMock(spec=LLMProvider)
        provider.chat_completion.side_effect = Exception("timeout")
        generator = CourseOutlineGenerator(provider)

        with pytest.raises(OutlineGenerationError, match="Failed to enhance section: timeout"):
            await generator.enhance_section("Module 1")

    @pytest.mark.asyncio
    async def test_without_provider(self):
        with pytest.raises(OutlineGenerationError, match="LLM not configured"):
            await CourseOutlineGenerator(None).enhance_section("Module 1")
