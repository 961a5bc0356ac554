"""
Configuration Settings.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # App info
    app_name: str = "CoursePilot"
    app_version: str = "1.0.0"
    debug: bool = True

    # Storage
    storage_type: str = "local"
    local_storage_path: str = "./data"

    # LLM Provider settings (chat completions + outline generation)
    llm_provider: str = "openai"
    llm_api_key: Optional[str] = None
    llm_model: Optional[str] = None  # uses provider default if not set
    llm_base_url: Optional[str] = None  # uses provider default if not set
    llm_timeout: float = 120.0

    # OpenAI audio (Whisper + TTS); also accepted as the LLM key
    openai_api_key: Optional[str] = None

    # Speech-to-text
    transcription_model: str = "whisper-1"
    transcription_language: str = "en"

    # Text-to-speech
    tts_model: str = "tts-1"
    tts_voice: str = "alloy"
    tts_format: str = "wav"

    # Generation limits
    chat_max_tokens: int = 500
    chat_temperature: float = 0.7
    outline_max_tokens: int = 4000
    outline_temperature: float = 0.7
    enhance_max_tokens: int = 1500
    enhance_temperature: float = 0.6

    # Voice chat sessions
    voice_session_grace_seconds: float = 30.0
    anonymous_user_id: str = "voice-user"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ]

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/coursepilot.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON format for files, human-readable for console
    log_llm_calls: bool = True  # Log all LLM calls with token usage

    class Config:
        env_file = ".env"
        case_sensitive = False

    def resolved_llm_api_key(self) -> Optional[str]:
        """LLM key, falling back to the OpenAI audio key."""
        return self.llm_api_key or self.openai_api_key


settings = Settings()
