"""Voice chat module - sessions, intent heuristics and the WebSocket dispatch service."""

from .intent import is_course_creation_request, is_summary_request
from .session import (
    SessionRegistry, VoiceSession, VoiceConnection, WebSocketConnection,
    WELCOME_MESSAGE, generate_session_id,
)
from .service import VoiceChatService, NO_SPEECH_MARKER
from .summary import create_outline_summary

__all__ = [
    'is_course_creation_request', 'is_summary_request',
    'SessionRegistry', 'VoiceSession', 'VoiceConnection', 'WebSocketConnection',
    'WELCOME_MESSAGE', 'generate_session_id',
    'VoiceChatService', 'NO_SPEECH_MARKER',
    'create_outline_summary',
]
