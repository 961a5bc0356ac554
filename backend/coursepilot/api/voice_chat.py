"""
Voice chat WebSocket endpoint.
"""

from fastapi import APIRouter, WebSocket

from ..voice.service import VoiceChatService

router = APIRouter(prefix="/api", tags=["voice-chat"])


def get_voice_chat_service(websocket: WebSocket) -> VoiceChatService:
    """Voice chat service created during application startup."""
    return websocket.app.state.voice_chat_service


@router.websocket("/voice-chat")
async def voice_chat(websocket: WebSocket):
    """
    Bidirectional voice conversation.

    Client frames are JSON objects of type ``audio``, ``text`` or ``context``;
    the server answers with ``response``, ``transcript``, ``ready`` and
    ``error`` messages.
    """
    service = get_voice_chat_service(websocket)
    await service.serve(websocket)
