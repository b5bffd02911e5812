"""
Centralized configuration for the JudgeGPT backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., SUPABASE_*, TTS_*).
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "JudgeGPT API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""

    # Streaming debate endpoint
    debate_stream_url: str = ""
    debate_stream_api_key: str = ""
    debate_stream_timeout: float = 120.0  # seconds
    max_frame_retries: int = 3
    max_pending_frame_bytes: int = 65536

    # Text-to-speech endpoint
    tts_url: str = ""
    tts_api_key: str = ""
    tts_timeout: float = 30.0  # seconds
    default_voice_id: str = ""
    voice_pause_seconds: float = 0.4
    audio_player_command: list[str] = [
        "ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet", "-",
    ]

    # Feature Flags
    enable_report_persistence: bool = True


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
