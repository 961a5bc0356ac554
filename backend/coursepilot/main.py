"""
CoursePilot - Main FastAPI Application
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .config import settings
from .api import courses_router, voice_chat_router
from .core.logging_config import setup_logging
from .llm.factory import create_llm_provider_from_settings
from .services.outline_generator import CourseOutlineGenerator
from .services.speech import get_speech_service
from .services.transcription import get_transcription_service
from .storage import LocalStorage, init_course_storage
from .voice.service import VoiceChatService

# Logger will be initialized after setup_logging() is called
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    setup_logging(settings)

    course_storage = init_course_storage(LocalStorage(settings.local_storage_path))
    logger.info(f"Course storage initialized at {settings.local_storage_path}")

    llm_provider = create_llm_provider_from_settings(settings)
    if llm_provider is None:
        logger.warning("No LLM API key configured; chat and outline generation are disabled")

    outline_generator = CourseOutlineGenerator(llm_provider)
    app.state.outline_generator = outline_generator
    app.state.voice_chat_service = VoiceChatService(
        transcription=get_transcription_service(),
        speech=get_speech_service(),
        llm_provider=llm_provider,
        outline_generator=outline_generator,
        course_storage=course_storage,
    )

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level.upper()}")
    logger.info(f"Debug mode: {settings.debug}")
    yield
    # Shutdown
    await app.state.voice_chat_service.shutdown()
    logger.info(f"Shutting down {settings.app_name}")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="AI course authoring backend with voice-driven outline creation",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(courses_router)
app.include_router(voice_chat_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "message": "Welcome to CoursePilot - describe a course and we'll draft it with you"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    voice_chat_service = getattr(app.state, "voice_chat_service", None)
    return {
        "status": "healthy",
        "storage": settings.storage_type,
        "version": settings.app_version,
        "voice_sessions": voice_chat_service.active_sessions_count() if voice_chat_service else 0,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "coursepilot.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
