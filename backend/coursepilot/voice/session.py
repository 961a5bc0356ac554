"""
Voice chat sessions and the registry that owns them.

A session lives exactly as long as its connection plus a grace window.
Retirement after disconnect waits for an in-flight handler to finish so a
late reply never runs against a deleted session.
"""

import asyncio
import contextlib
import logging
import secrets
import string
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from ..core.logging_config import SessionLoggerAdapter
from ..models.course import GeneratedCourseOutline
from ..models.voice import ResponseMessage, ServerMessage

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Hello! I'm your AI course creation assistant. I can help you create, edit, "
    "and improve your course outlines through natural conversation. "
    "What would you like to work on today?"
)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_session_id() -> str:
    """Opaque id of the form voice_<epoch ms>_<9 random chars>."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"voice_{int(time.time() * 1000)}_{suffix}"


class VoiceConnection(ABC):
    """Push channel to one client."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        ...

    @abstractmethod
    async def send_json(self, payload: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...


class WebSocketConnection(VoiceConnection):
    """VoiceConnection backed by a Starlette WebSocket."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self._closed = False

    @property
    def is_open(self) -> bool:
        return (
            not self._closed
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    def mark_closed(self) -> None:
        self._closed = True

    async def send_json(self, payload: Dict[str, Any]) -> None:
        if not self.is_open:
            return
        try:
            await self.websocket.send_json(payload)
        except (WebSocketDisconnect, RuntimeError) as e:
            # Peer went away between the state check and the send
            logger.warning(f"Dropping {payload.get('type')} message, socket closed: {e}")
            self._closed = True

    async def close(self) -> None:
        if self.is_open:
            self._closed = True
            await self.websocket.close()


@dataclass
class VoiceSession:
    """Per-connection conversation state."""
    id: str
    connection: VoiceConnection
    user_id: Optional[str] = None
    conversation_history: List[Dict[str, str]] = field(default_factory=list)
    is_processing: bool = False
    last_created_outline: Optional[GeneratedCourseOutline] = None
    active_handlers: int = 0
    _idle: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    def __post_init__(self):
        self._idle.set()
        self.log = SessionLoggerAdapter(logger, {"session_id": self.id})

    def add_message(self, role: str, content: str) -> None:
        self.conversation_history.append({"role": role, "content": content})

    @property
    def last_user_message(self) -> str:
        for message in reversed(self.conversation_history):
            if message["role"] == "user":
                return message["content"]
        return ""

    async def send(self, message: ServerMessage) -> None:
        await self.connection.send_json(message.to_payload())

    @contextlib.contextmanager
    def handler_scope(self) -> Iterator["VoiceSession"]:
        """Mark a message handler as running against this session."""
        self.active_handlers += 1
        self._idle.clear()
        try:
            yield self
        finally:
            self.active_handlers -= 1
            if self.active_handlers == 0:
                self._idle.set()

    async def wait_idle(self) -> None:
        await self._idle.wait()


class SessionRegistry:
    """
    In-memory map of live voice sessions keyed by their connect-time id.
    """

    def __init__(self, grace_seconds: float = 30.0):
        self.grace_seconds = grace_seconds
        self._sessions: Dict[str, VoiceSession] = {}
        self._retirements: Dict[str, asyncio.Task] = {}

    async def create(self, connection: VoiceConnection, user_id: Optional[str] = None) -> VoiceSession:
        """Register a session for a new connection and greet the client."""
        session = VoiceSession(id=generate_session_id(), connection=connection, user_id=user_id)
        session.add_message("assistant", WELCOME_MESSAGE)
        self._sessions[session.id] = session
        session.log.info("Voice chat session connected")

        await session.send(ResponseMessage(text=WELCOME_MESSAGE))
        return session

    def get(self, session_id: str) -> Optional[VoiceSession]:
        return self._sessions.get(session_id)

    def retire(self, session_id: str) -> None:
        """Forget a session. Safe to call more than once."""
        session = self._sessions.pop(session_id, None)
        task = self._retirements.pop(session_id, None)
        if task is not None and task is not asyncio.current_task():
            task.cancel()
        if session is not None:
            session.log.info("Voice chat session retired")

    def schedule_retirement(self, session_id: str, delay: Optional[float] = None) -> asyncio.Task:
        """Retire the session after the grace window, once no handler is running."""
        existing = self._retirements.pop(session_id, None)
        if existing is not None:
            existing.cancel()
        task = asyncio.create_task(
            self._retire_after(session_id, self.grace_seconds if delay is None else delay)
        )
        self._retirements[session_id] = task
        return task

    async def _retire_after(self, session_id: str, delay: float) -> None:
        await asyncio.sleep(delay)
        session = self._sessions.get(session_id)
        if session is not None and session.active_handlers:
            session.log.info(
                f"Grace window elapsed with {session.active_handlers} handler(s) running, "
                "deferring cleanup"
            )
            await session.wait_idle()
        if session is not None:
            session.log.info("Cleaning up session after timeout")
        self.retire(session_id)

    def count(self) -> int:
        return len(self._sessions)

    async def close_all(self) -> None:
        """Close every live connection and empty the registry (process shutdown)."""
        for task in self._retirements.values():
            task.cancel()
        self._retirements.clear()

        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            try:
                await session.connection.close()
            except Exception as e:
                session.log.warning(f"Error closing voice chat connection: {e}")
        logger.info(f"Closed {len(sessions)} voice chat session(s)")
