"""
Shared test fixtures and configuration.
"""

import pytest
import os
from unittest.mock import AsyncMock, MagicMock

# Set test environment variables before importing app modules
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/coursepilot_test_data")
os.environ["LOG_FILE_ENABLED"] = "false"
os.environ["OPENAI_API_KEY"] = ""
os.environ["LLM_API_KEY"] = ""

from coursepilot.config import settings  # noqa: E402
from coursepilot.llm.base import LLMProvider, LLMResponse  # noqa: E402
from coursepilot.models.course import (  # noqa: E402
    CourseLesson, CourseOutlineModule, GeneratedCourseOutline,
)
from coursepilot.services.outline_generator import CourseOutlineGenerator  # noqa: E402
from coursepilot.services.speech import SpeechSynthesisService  # noqa: E402
from coursepilot.services.transcription import TranscriptionService  # noqa: E402
from coursepilot.storage import CourseStorage, LocalStorage  # noqa: E402
from coursepilot.voice.service import VoiceChatService  # noqa: E402
from coursepilot.voice.session import SessionRegistry, VoiceConnection  # noqa: E402


class FakeConnection(VoiceConnection):
    """Records every payload pushed to the client."""

    def __init__(self):
        self.sent = []
        self.closed = False

    @property
    def is_open(self) -> bool:
        return not self.closed

    async def send_json(self, payload):
        if not self.closed:
            self.sent.append(payload)

    async def close(self):
        self.closed = True

    def types(self):
        return [message["type"] for message in self.sent]


@pytest.fixture
def connection():
    return FakeConnection()


@pytest.fixture
def sample_outline():
    return GeneratedCourseOutline(
        title="Knife Sharpening Fundamentals",
        description="Learn to keep an edge.",
        target_audience="Home Cooks",
        total_duration="4 hours",
        course_type="Self-paced online course",
        modules=[
            CourseOutlineModule(title="Steel and Edges", lessons=[CourseLesson(title="a"), CourseLesson(title="b")]),
            CourseOutlineModule(title="Whetstones", lessons=[CourseLesson(title="c")]),
            CourseOutlineModule(title="Honing", lessons=[]),
            CourseOutlineModule(title="Maintenance", lessons=[CourseLesson(title="d")] * 3),
        ],
    )


@pytest.fixture
def course_storage(tmp_path):
    return CourseStorage(LocalStorage(str(tmp_path / "data")))


@pytest.fixture
def mock_llm():
    provider = AsyncMock(spec=LLMProvider)
    provider.chat_completion.return_value = LLMResponse(
        content="Happy to help with your course.", model="test"
    )
    return provider


@pytest.fixture
def mock_transcription():
    service = MagicMock(spec=TranscriptionService)
    service.transcribe_audio = AsyncMock(return_value="Hello there")
    return service


@pytest.fixture
def mock_speech():
    service = MagicMock(spec=SpeechSynthesisService)
    service.synthesize_base64 = AsyncMock(return_value="UklGRgAAAAA=")
    return service


@pytest.fixture
def mock_outline_generator(sample_outline):
    generator = MagicMock(spec=CourseOutlineGenerator)
    generator.generate = AsyncMock(return_value=sample_outline)
    return generator


@pytest.fixture
def voice_service(mock_transcription, mock_speech, mock_llm, mock_outline_generator, course_storage):
    return VoiceChatService(
        transcription=mock_transcription,
        speech=mock_speech,
        llm_provider=mock_llm,
        outline_generator=mock_outline_generator,
        course_storage=course_storage,
        registry=SessionRegistry(grace_seconds=0.05),
        config=settings,
    )
