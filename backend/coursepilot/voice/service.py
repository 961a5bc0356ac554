"""
Voice Chat Service - Conversational dispatch for the voice chat WebSocket.

Every inbound frame is handled in its own task. Text and audio handling is
guarded by the session's processing flag: input that arrives while a reply
is being produced is dropped, and the client is sent a ``ready`` message
whenever the server will accept the next utterance.
"""

import asyncio
import base64
import json
import logging
from typing import Any, Dict, Optional, Set

from fastapi import WebSocket
from pydantic import ValidationError

from ..config import settings as default_settings
from ..core.logging_config import SessionLoggerAdapter, truncate_large_data
from ..llm.base import LLMProvider, LLMMessage
from ..models.course import CourseGenerationRequest, CourseOutlineCreate, ProjectCreate
from ..models.voice import (
    AudioMessage, TextMessage, ContextMessage,
    ResponseMessage, TranscriptMessage, ReadyMessage, ErrorMessage,
    CLIENT_MESSAGE_TYPES, client_message_adapter,
)
from ..services.outline_generator import CourseOutlineGenerator
from ..services.speech import SpeechSynthesisService
from ..services.transcription import TranscriptionService, detect_audio_format
from ..storage.course_storage import CourseStorage
from .intent import is_course_creation_request, is_summary_request
from .session import SessionRegistry, VoiceConnection, VoiceSession, WebSocketConnection
from .summary import create_outline_summary

logger = logging.getLogger(__name__)

NO_SPEECH_MARKER = "[No speech detected]"
MESSAGE_ERROR = "Failed to process message"
AUDIO_ERROR = "Failed to process audio. Please try speaking again."
RESPONSE_ERROR = "Failed to generate response"
EMPTY_REPLY_FALLBACK = "I didn't understand that. Could you please rephrase?"

ASSISTANT_SYSTEM_PROMPT = """You are an expert course creation assistant. Help users create, edit, and improve their educational content through natural conversation.

Key capabilities:
- Generate course outlines and content
- Suggest improvements to existing courses
- Help with module and lesson planning
- Provide pedagogical advice
- Answer questions about course structure

Keep responses conversational, helpful, and focused on course creation. If users ask about editing existing content, provide specific, actionable suggestions."""

OUTLINE_CONFIRMATION = """Perfect! I've created a comprehensive course outline for "{title}".

Your course outline is ready at: {url}

This includes {module_count} modules with detailed lessons, activities, and assessments. You can edit and customize everything on the outline page.

Would you like me to provide a quick voice summary of the main topics and structure?"""

VOICE_COURSE_DEFAULTS = {
    "target_audience": "General learners",
    "duration": "4-6 hours",
    "course_type": "Self-paced online course",
}


def _session_log(session: VoiceSession) -> SessionLoggerAdapter:
    """This module's logger, tagged with the session id."""
    return SessionLoggerAdapter(logger, {"session_id": session.id})


class VoiceChatService:
    """
    Owns the session registry and turns client messages into spoken replies.
    """

    def __init__(
        self,
        transcription: TranscriptionService,
        speech: SpeechSynthesisService,
        llm_provider: Optional[LLMProvider],
        outline_generator: CourseOutlineGenerator,
        course_storage: CourseStorage,
        registry: Optional[SessionRegistry] = None,
        config: Any = default_settings,
    ):
        self.transcription = transcription
        self.speech = speech
        self.llm_provider = llm_provider
        self.outline_generator = outline_generator
        self.course_storage = course_storage
        self.config = config
        self.registry = registry or SessionRegistry(grace_seconds=config.voice_session_grace_seconds)
        self._tasks: Set[asyncio.Task] = set()

    # Connection lifecycle

    async def serve(self, websocket: WebSocket, user_id: Optional[str] = None) -> None:
        """Run one WebSocket connection until the client goes away."""
        await websocket.accept()
        connection = WebSocketConnection(websocket)
        session = await self.connect(connection, user_id=user_id)

        try:
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    break
                raw = frame.get("text")
                if raw is None:
                    raw = (frame.get("bytes") or b"").decode("utf-8", errors="replace")
                self._spawn(session.id, raw)
        except Exception as e:
            _session_log(session).error(f"Voice chat connection error: {e}", exc_info=True)
        finally:
            connection.mark_closed()
            self.disconnect(session.id)

    async def connect(self, connection: VoiceConnection, user_id: Optional[str] = None) -> VoiceSession:
        return await self.registry.create(connection, user_id=user_id)

    def disconnect(self, session_id: str) -> Optional[asyncio.Task]:
        """Start the grace window for a live session. Sessions already closed by shutdown are skipped."""
        session = self.registry.get(session_id)
        if session is None:
            return None
        _session_log(session).info("Voice chat session disconnected")
        return self.registry.schedule_retirement(session_id)

    def active_sessions_count(self) -> int:
        return self.registry.count()

    async def shutdown(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.registry.close_all()

    def _spawn(self, session_id: str, raw: str) -> asyncio.Task:
        task = asyncio.create_task(self.handle_raw_message(session_id, raw))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # Dispatch

    async def handle_raw_message(self, session_id: str, raw: str) -> None:
        """Parse one client frame and route it. Unknown sessions are ignored."""
        session = self.registry.get(session_id)
        if session is None:
            logger.debug(f"Dropping message for unknown session {session_id}")
            return

        with session.handler_scope():
            try:
                payload = json.loads(raw)
                if not isinstance(payload, dict):
                    raise ValueError("message must be a JSON object")
                message_type = payload.get("type")
                if not isinstance(message_type, str) or message_type not in CLIENT_MESSAGE_TYPES:
                    _session_log(session).debug(f"Ignoring message of type {message_type!r}")
                    return
                message = client_message_adapter.validate_python(payload)
            except (ValueError, ValidationError) as e:
                _session_log(session).warning(f"Malformed voice chat message: {e}")
                await session.send(ErrorMessage(message=MESSAGE_ERROR))
                return

            try:
                await self.dispatch(session, message)
            except Exception as e:
                _session_log(session).error(f"Error processing voice chat message: {e}", exc_info=True)
                await session.send(ErrorMessage(message=MESSAGE_ERROR))

    async def dispatch(self, session: VoiceSession, message) -> None:
        if isinstance(message, AudioMessage):
            await self.handle_audio_message(session, message.data)
        elif isinstance(message, TextMessage):
            await self.handle_text_message(session, message.text)
        elif isinstance(message, ContextMessage):
            self.update_context(session, message.context)

    # Audio

    async def handle_audio_message(self, session: VoiceSession, audio_data: str) -> None:
        try:
            audio = base64.b64decode(audio_data)
            filename, mime_type = detect_audio_format(audio)
            _session_log(session).info(f"Processing audio: {filename}, size: {len(audio)} bytes")
            transcript = await self.transcription.transcribe_audio(audio, filename, mime_type)
        except Exception as e:
            _session_log(session).error(f"Error processing audio: {e}", exc_info=True)
            await session.send(ErrorMessage(message=AUDIO_ERROR))
            return

        transcript = transcript.strip()
        if not transcript:
            await session.send(TranscriptMessage(text=NO_SPEECH_MARKER))
            return

        _session_log(session).info(f"Transcribed: {truncate_large_data(transcript)}")
        await session.send(TranscriptMessage(text=transcript))
        await self.handle_text_message(session, transcript)

    # Text

    async def handle_text_message(self, session: VoiceSession, text: str) -> None:
        if session.is_processing:
            _session_log(session).debug("Busy, dropping input")
            return

        session.is_processing = True
        _session_log(session).info(f"Processing text message: {truncate_large_data(text)}")

        try:
            session.add_message("user", text)

            if is_course_creation_request(text):
                await self.handle_course_creation(session, text)
            else:
                await self.handle_regular_conversation(session)
        except Exception as e:
            _session_log(session).error(f"Error generating AI response: {e}", exc_info=True)
            await session.send(ErrorMessage(message=RESPONSE_ERROR))
        finally:
            session.is_processing = False
            await session.send(ReadyMessage())

    def update_context(self, session: VoiceSession, context: Dict[str, Any]) -> None:
        """Acknowledge the outline the user has open, if the context names one."""
        current_outline = context.get("currentOutline")
        if not isinstance(current_outline, dict) or not current_outline.get("title"):
            return
        session.add_message(
            "assistant",
            f'I can see you\'re working on "{current_outline["title"]}". How can I help you improve it?'
        )

    # Replies

    async def handle_course_creation(self, session: VoiceSession, text: str) -> None:
        """Generate and save an outline; degrade to a normal reply on failure."""
        try:
            _session_log(session).info("Generating course outline from voice input")
            request = CourseGenerationRequest(
                description=text,
                title=f"Course on {text[:50]}",
                **VOICE_COURSE_DEFAULTS,
            )
            outline = await self.outline_generator.generate(request)
            session.last_created_outline = outline

            project = await self.course_storage.create_project(ProjectCreate(
                user_id=session.user_id or self.config.anonymous_user_id,
                title=outline.title,
                description=outline.description,
                status="in_progress",
            ))
            saved_outline = await self.course_storage.create_course_outline(CourseOutlineCreate(
                project_id=project.id,
                title=outline.title,
                content=outline.model_dump(by_alias=True),
                version=1,
                is_active=True,
            ))
        except Exception as e:
            _session_log(session).error(f"Error creating course outline: {e}", exc_info=True)
            await self.handle_regular_conversation(session)
            return

        outline_url = f"/outline/{saved_outline.id}"
        reply = OUTLINE_CONFIRMATION.format(
            title=outline.title,
            url=outline_url,
            module_count=len(outline.modules),
        )
        session.add_message("assistant", reply)

        audio = await self.speech.synthesize_base64(reply)
        await session.send(ResponseMessage(
            text=reply,
            audio=audio,
            outline_url=outline_url,
            outline_id=saved_outline.id,
        ))
        _session_log(session).info(f"Course outline created and sent to client: {outline_url}")

    async def handle_regular_conversation(self, session: VoiceSession) -> None:
        if is_summary_request(session.last_user_message) and session.last_created_outline:
            await self.handle_summary_request(session)
            return

        if self.llm_provider is None:
            raise RuntimeError("LLM not configured. Set LLM_API_KEY or OPENAI_API_KEY in environment.")

        messages = [LLMMessage.text("system", ASSISTANT_SYSTEM_PROMPT)]
        messages += LLMMessage.from_history(session.conversation_history)

        response = await self.llm_provider.chat_completion(
            messages,
            temperature=self.config.chat_temperature,
            max_tokens=self.config.chat_max_tokens,
        )
        reply = response.content or EMPTY_REPLY_FALLBACK
        _session_log(session).info(f"AI response generated: {truncate_large_data(reply)}")

        await self._speak(session, reply)

    async def handle_summary_request(self, session: VoiceSession) -> None:
        outline = session.last_created_outline
        if outline is None:
            return
        await self._speak(session, create_outline_summary(outline))

    async def _speak(self, session: VoiceSession, reply: str) -> None:
        """Record an assistant reply, voice it, and send both to the client."""
        session.add_message("assistant", reply)
        audio = await self.speech.synthesize_base64(reply)
        await session.send(ResponseMessage(text=reply, audio=audio))
