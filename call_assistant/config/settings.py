"""
Environment-backed settings for the call assistant.

Settings are read from environment variables (a .env file is loaded by the
application entry point before this module is used). Numeric values that fail to
parse fall back to their defaults so a typo in the environment never stops the
server; missing credentials are reported by Settings.validate_required().
"""

import os
from typing import List, Optional

from pydantic import BaseModel, Field

from call_assistant.config.constants import (
    DEFAULT_AUDIO_DIR,
    DEFAULT_ELEVENLABS_MODEL,
    DEFAULT_ELEVENLABS_SIMILARITY_BOOST,
    DEFAULT_ELEVENLABS_STABILITY,
    DEFAULT_ELEVENLABS_STYLE,
    DEFAULT_MAX_CONVERSATION_LENGTH,
    DEFAULT_OPENAI_MAX_TOKENS,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_OPENAI_TEMPERATURE,
    DEFAULT_RESPONSE_TIMEOUT,
    DEFAULT_SESSION_IDLE_SECONDS,
    DEFAULT_SESSION_SWEEP_SECONDS,
)
from call_assistant.errors import ConfigurationError

REQUIRED_SETTINGS = {
    "twilio_account_sid": "TWILIO_ACCOUNT_SID",
    "twilio_auth_token": "TWILIO_AUTH_TOKEN",
    "twilio_phone_number": "TWILIO_PHONE_NUMBER",
    "openai_api_key": "OPENAI_API_KEY",
    "elevenlabs_api_key": "ELEVENLABS_API_KEY",
    "elevenlabs_voice_id": "ELEVENLABS_VOICE_ID",
}


class Settings(BaseModel):
    """Validated application settings."""

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    public_base_url: str = "http://localhost:8000"
    log_level: str = "INFO"

    # Twilio
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_phone_number: Optional[str] = None

    # OpenAI
    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    openai_max_tokens: int = Field(DEFAULT_OPENAI_MAX_TOKENS, gt=0)
    openai_temperature: float = Field(DEFAULT_OPENAI_TEMPERATURE, ge=0.0, le=2.0)

    # ElevenLabs
    elevenlabs_api_key: Optional[str] = None
    elevenlabs_voice_id: Optional[str] = None
    elevenlabs_model: str = DEFAULT_ELEVENLABS_MODEL
    elevenlabs_stability: float = DEFAULT_ELEVENLABS_STABILITY
    elevenlabs_similarity_boost: float = DEFAULT_ELEVENLABS_SIMILARITY_BOOST
    elevenlabs_style: float = DEFAULT_ELEVENLABS_STYLE
    elevenlabs_use_speaker_boost: bool = False

    # Conversation
    max_conversation_length: int = Field(DEFAULT_MAX_CONVERSATION_LENGTH, gt=0)
    response_timeout: float = Field(DEFAULT_RESPONSE_TIMEOUT, gt=0)
    session_idle_seconds: float = Field(DEFAULT_SESSION_IDLE_SECONDS, gt=0)
    session_sweep_seconds: float = Field(DEFAULT_SESSION_SWEEP_SECONDS, gt=0)
    audio_dir: str = DEFAULT_AUDIO_DIR

    def missing_required(self) -> List[str]:
        """Return the environment variable names of unset credentials."""
        return [
            env_name
            for field_name, env_name in REQUIRED_SETTINGS.items()
            if not getattr(self, field_name)
        ]

    def validate_required(self) -> bool:
        """
        Check that all external credentials are configured.

        Raises:
            ConfigurationError: If any required credential is missing
        """
        missing = self.missing_required()
        if missing:
            raise ConfigurationError(missing)
        return True

    @property
    def base_url(self) -> str:
        return self.public_base_url.rstrip("/")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, ""))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, ""))
    except ValueError:
        return default


def load_settings() -> Settings:
    """Build Settings from the current environment."""
    port = _env_int("PORT", 8000)
    return Settings(
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        public_base_url=os.getenv("PUBLIC_BASE_URL", f"http://localhost:{port}"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        twilio_account_sid=os.getenv("TWILIO_ACCOUNT_SID"),
        twilio_auth_token=os.getenv("TWILIO_AUTH_TOKEN"),
        twilio_phone_number=os.getenv("TWILIO_PHONE_NUMBER"),
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        openai_model=os.getenv("OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
        openai_max_tokens=_env_int("OPENAI_MAX_TOKENS", DEFAULT_OPENAI_MAX_TOKENS),
        openai_temperature=_env_float("OPENAI_TEMPERATURE", DEFAULT_OPENAI_TEMPERATURE),
        elevenlabs_api_key=os.getenv("ELEVENLABS_API_KEY"),
        elevenlabs_voice_id=os.getenv("ELEVENLABS_VOICE_ID"),
        elevenlabs_model=os.getenv("ELEVENLABS_MODEL", DEFAULT_ELEVENLABS_MODEL),
        elevenlabs_stability=_env_float(
            "ELEVENLABS_STABILITY", DEFAULT_ELEVENLABS_STABILITY
        ),
        elevenlabs_similarity_boost=_env_float(
            "ELEVENLABS_SIMILARITY_BOOST", DEFAULT_ELEVENLABS_SIMILARITY_BOOST
        ),
        elevenlabs_style=_env_float("ELEVENLABS_STYLE", DEFAULT_ELEVENLABS_STYLE),
        elevenlabs_use_speaker_boost=os.getenv(
            "ELEVENLABS_USE_SPEAKER_BOOST", "false"
        ).lower()
        == "true",
        max_conversation_length=_env_int(
            "MAX_CONVERSATION_LENGTH", DEFAULT_MAX_CONVERSATION_LENGTH
        ),
        response_timeout=_env_float("RESPONSE_TIMEOUT", DEFAULT_RESPONSE_TIMEOUT),
        session_idle_seconds=_env_float(
            "SESSION_IDLE_SECONDS", DEFAULT_SESSION_IDLE_SECONDS
        ),
        session_sweep_seconds=_env_float(
            "SESSION_SWEEP_SECONDS", DEFAULT_SESSION_SWEEP_SECONDS
        ),
        audio_dir=os.getenv("AUDIO_DIR", DEFAULT_AUDIO_DIR),
    )
