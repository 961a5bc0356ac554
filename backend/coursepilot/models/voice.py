"""
Voice Chat Models - Messages exchanged over the voice chat WebSocket.
"""

from typing import Annotated, Any, Dict, Literal, Optional, Union
from pydantic import BaseModel, Field, TypeAdapter

from .course import CamelModel


# Client -> server

class AudioMessage(BaseModel):
    """Recorded audio, base64 encoded."""
    type: Literal["audio"]
    data: str


class TextMessage(BaseModel):
    """Typed utterance."""
    type: Literal["text"]
    text: str


class ContextMessage(BaseModel):
    """Advisory editor context, e.g. the outline currently on screen."""
    type: Literal["context"]
    context: Dict[str, Any] = Field(default_factory=dict)


ClientMessage = Annotated[
    Union[AudioMessage, TextMessage, ContextMessage],
    Field(discriminator="type"),
]

CLIENT_MESSAGE_TYPES = frozenset({"audio", "text", "context"})

client_message_adapter: TypeAdapter = TypeAdapter(ClientMessage)


# Server -> client

class ServerMessage(CamelModel):
    type: str

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ResponseMessage(ServerMessage):
    type: Literal["response"] = "response"
    text: str
    audio: Optional[str] = None
    outline_url: Optional[str] = None
    outline_id: Optional[int] = None


class TranscriptMessage(ServerMessage):
    type: Literal["transcript"] = "transcript"
    text: str


class ReadyMessage(ServerMessage):
    type: Literal["ready"] = "ready"
    message: str = "Ready for next input"


class ErrorMessage(ServerMessage):
    type: Literal["error"] = "error"
    message: str
