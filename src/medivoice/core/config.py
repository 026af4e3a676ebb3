"""
Configuration management for MediVoice application.

This module provides centralized configuration using Pydantic Settings
for environment-based configuration management.
"""

from typing import List, Optional

import json
import os
from pathlib import Path

from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    model_config = SettingsConfigDict(env_prefix="MONGO_")

    uri: str = Field(
        default="mongodb://localhost:27017", description="MongoDB connection URI"
    )
    db_name: str = Field(default="medivoice", description="MongoDB database name")
    server_selection_timeout_ms: int = Field(
        default=15000, description="Server selection timeout in milliseconds"
    )

    @validator("uri")
    def validate_mongo_uri(cls, v: str) -> str:
        """Validate MongoDB URI format."""
        if not v:
            raise ValueError("MongoDB URI is required. Please set MONGO_URI environment variable.")
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError(
                "MongoDB URI must start with 'mongodb://' or 'mongodb+srv://'"
            )
        return v


class AzureOpenAISettings(BaseSettings):
    """Azure OpenAI configuration settings."""

    model_config = SettingsConfigDict(env_prefix="AZURE_OPENAI_")

    endpoint: str = Field(default="", description="Azure OpenAI endpoint URL")
    api_key: str = Field(default="", description="Azure OpenAI API key")
    api_version: str = Field(default="2024-12-01-preview", description="Azure OpenAI API version")
    deployment_name: str = Field(default="gpt-4o-mini", description="Azure OpenAI chat deployment name")

    @validator("endpoint")
    def validate_endpoint(cls, v: str) -> str:
        """Validate Azure OpenAI endpoint format."""
        if v and not v.startswith("https://"):
            raise ValueError("Invalid Azure OpenAI endpoint format. Must be: https://xxx.openai.azure.com/")
        return v

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint and self.api_key)


class CompletionSettings(BaseSettings):
    """Language-model completion settings for consultation turns and reports."""

    model_config = SettingsConfigDict(env_prefix="COMPLETION_")

    temperature: float = Field(default=0.7, description="Temperature for consultation replies")
    max_tokens: int = Field(default=250, description="Maximum tokens for a consultation reply")
    timeout_seconds: float = Field(default=30.0, description="Upper bound for a single completion call")
    report_temperature: float = Field(default=0.3, description="Temperature for report generation")
    report_max_tokens: int = Field(default=1200, description="Maximum tokens for report generation")

    @validator("temperature", "report_temperature")
    def validate_temperature(cls, v: float) -> float:
        """Validate temperature."""
        if not 0.0 <= v <= 2.0:
            raise ValueError("Temperature must be between 0.0 and 2.0")
        return v


class VoiceServiceSettings(BaseSettings):
    """Speech-to-text / text-to-speech service settings."""

    model_config = SettingsConfigDict(env_prefix="VOICE_SERVICE_")

    url: str = Field(default="http://localhost:8001", description="Base URL of the voice service")
    transcription_timeout_seconds: float = Field(default=10.0, description="Transcription timeout")
    synthesis_timeout_seconds: float = Field(default=45.0, description="Speech synthesis timeout")
    speaker: str = Field(default="idera", description="Default synthesis voice")
    max_words: int = Field(default=80, description="Words kept before synthesis truncates the text")
    temperature: float = Field(default=0.1, description="Synthesis sampling temperature")
    repetition_penalty: float = Field(default=1.1, description="Synthesis repetition penalty")
    max_length: int = Field(default=1500, description="Synthesis max generated length")

    @validator("url")
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @validator("max_words")
    def validate_max_words(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_words must be positive")
        return v


class NatlasSettings(BaseSettings):
    """N-ATLAS medical keyword enrichment service settings."""

    model_config = SettingsConfigDict(env_prefix="NATLAS_")

    api_url: str = Field(default="https://natlas-api.onrender.com", description="N-ATLAS base URL")
    timeout_seconds: float = Field(default=15.0, description="Per-attempt timeout")
    max_attempts: int = Field(default=2, description="Attempts before giving up")
    base_delay_seconds: float = Field(default=1.0, description="Initial retry backoff")
    max_delay_seconds: float = Field(default=5.0, description="Backoff ceiling")
    health_timeout_seconds: float = Field(default=5.0, description="Health check timeout")

    @validator("api_url")
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @validator("max_attempts")
    def validate_max_attempts(cls, v: int) -> int:
        if not 1 <= v <= 5:
            raise ValueError("max_attempts must be between 1 and 5")
        return v


class RateLimitSettings(BaseSettings):
    """Per-IP fixed-window rate limiting."""

    model_config = SettingsConfigDict(env_prefix="RATE_LIMIT_")

    enabled: bool = Field(default=True, description="Enable per-IP rate limiting")
    max_requests: int = Field(default=30, description="Requests allowed per window")
    window_seconds: float = Field(default=60.0, description="Window length in seconds")


class ConsultationSettings(BaseSettings):
    """Consultation session behaviour."""

    model_config = SettingsConfigDict(env_prefix="CONSULTATION_")

    default_language: str = Field(default="english", description="Language used when a turn names none")
    max_note_chars: int = Field(default=5000, description="Maximum length of session notes")
    report_history_limit: int = Field(default=10, description="Trailing messages sent to the report compiler")


class CORSSettings(BaseSettings):
    """CORS configuration settings."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    allowed_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )
    allowed_methods: List[str] = Field(
        default=["GET", "POST", "DELETE", "OPTIONS"],
        description="Allowed HTTP methods",
    )
    allowed_headers: List[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )
    allow_credentials: bool = Field(
        default=True, description="Allow credentials in CORS"
    )

    @validator("allowed_origins", pre=True)
    def parse_allowed_origins(cls, v):
        """Parse allowed origins from string or list."""
        if isinstance(v, str):
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v.strip()]
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="text", description="Log format (json or text)")

    @validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @validator("format")
    def validate_format(cls, v: str) -> str:
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="MediVoice", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    app_env: str = Field(default="development", description="Application environment")
    debug: bool = Field(default=False, description="Debug mode")
    port: int = Field(default=8000, description="Application port")
    host: str = Field(default="0.0.0.0", description="Application host")

    # Sub-settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    azure_openai: AzureOpenAISettings = Field(default_factory=AzureOpenAISettings)
    completion: CompletionSettings = Field(default_factory=CompletionSettings)
    voice_service: VoiceServiceSettings = Field(default_factory=VoiceServiceSettings)
    natlas: NatlasSettings = Field(default_factory=NatlasSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    consultation: ConsultationSettings = Field(default_factory=ConsultationSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @validator("app_env")
    def validate_app_env(cls, v: str) -> str:
        """Validate application environment."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"App environment must be one of: {valid_envs}")
        return v.lower()

    @validator("port")
    def validate_port(cls, v: int) -> int:
        """Validate port number."""
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.app_env == "testing"


# Global settings instance (loaded after attempting to read .env)
_settings: Optional[Settings] = None


def _load_env_file_if_available() -> None:
    """Best-effort load of .env by searching current and parent directories.

    pydantic's env_file is resolved relative to the working directory only,
    which breaks when the server is launched from a parent folder.
    """
    from dotenv import load_dotenv

    cwd = Path(os.getcwd()).resolve()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / ".env"
        if candidate.exists():
            # Do not override already-set environment variables
            load_dotenv(dotenv_path=str(candidate), override=False)
            break


def get_settings() -> Settings:
    """Get application settings instance (lazy-init with .env discovery)."""
    global _settings
    if _settings is None:
        _load_env_file_if_available()
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
