"""API module."""

from .courses import router as courses_router
from .voice_chat import router as voice_chat_router

__all__ = ['courses_router', 'voice_chat_router']
