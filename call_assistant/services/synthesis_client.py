"""
Client for the ElevenLabs text-to-speech API.

Like the completion client, requests run in a worker thread. Any failure,
including an empty audio payload, is raised as a SynthesisError so the
orchestrator can fall back to Twilio's built-in voice.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import requests

from call_assistant.config.constants import (
    DEFAULT_ELEVENLABS_MODEL,
    DEFAULT_ELEVENLABS_SIMILARITY_BOOST,
    DEFAULT_ELEVENLABS_STABILITY,
    DEFAULT_ELEVENLABS_STYLE,
    DEFAULT_RESPONSE_TIMEOUT,
    ELEVENLABS_BASE_URL,
    LOGGER_NAME,
)
from call_assistant.config.logging_config import log_api_call
from call_assistant.errors import SynthesisError

logger = logging.getLogger(LOGGER_NAME)


class SynthesisClient:
    """Turns reply text into MP3 audio with an ElevenLabs voice."""

    def __init__(
        self,
        api_key: Optional[str],
        voice_id: Optional[str],
        model: str = DEFAULT_ELEVENLABS_MODEL,
        stability: float = DEFAULT_ELEVENLABS_STABILITY,
        similarity_boost: float = DEFAULT_ELEVENLABS_SIMILARITY_BOOST,
        style: float = DEFAULT_ELEVENLABS_STYLE,
        use_speaker_boost: bool = False,
        timeout: float = DEFAULT_RESPONSE_TIMEOUT,
        base_url: str = ELEVENLABS_BASE_URL,
    ):
        self.api_key = api_key
        self.voice_id = voice_id
        self.model = model
        self.voice_settings = {
            "stability": stability,
            "similarity_boost": similarity_boost,
            "style": style,
            "use_speaker_boost": use_speaker_boost,
        }
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    async def synthesize(
        self,
        text: str,
        model: Optional[str] = None,
        voice_settings: Optional[Dict[str, Any]] = None,
    ) -> bytes:
        """
        Convert text to speech.

        Args:
            text: Text to speak
            model: Overrides the configured synthesis model id
            voice_settings: Overrides individual voice settings

        Returns:
            The MP3 audio bytes

        Raises:
            SynthesisError: If the request fails or returns no audio
        """
        if not self.api_key or not self.voice_id:
            raise SynthesisError("ElevenLabs API key or voice id is not configured")

        payload = {
            "text": text,
            "model_id": model or self.model,
            "voice_settings": {**self.voice_settings, **(voice_settings or {})},
        }
        headers = {
            "xi-api-key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "audio/mpeg",
        }
        url = f"{self.base_url}/v1/text-to-speech/{self.voice_id}"

        start_time = time.perf_counter()
        try:
            response = await asyncio.to_thread(
                requests.post, url, headers=headers, json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            log_api_call(
                logger, "elevenlabs", "text-to-speech", duration_ms, False, error=e
            )
            raise SynthesisError(f"ElevenLabs TTS error: {e}") from e

        duration_ms = (time.perf_counter() - start_time) * 1000

        if response.status_code != 200:
            detail = _error_detail(response)
            log_api_call(
                logger,
                "elevenlabs",
                "text-to-speech",
                duration_ms,
                False,
                status=response.status_code,
                error=detail,
            )
            raise SynthesisError(f"ElevenLabs TTS error: {response.status_code} {detail}")

        audio = response.content
        if not audio:
            log_api_call(
                logger, "elevenlabs", "text-to-speech", duration_ms, False, error="empty audio"
            )
            raise SynthesisError("ElevenLabs returned an empty audio payload")

        log_api_call(
            logger,
            "elevenlabs",
            "text-to-speech",
            duration_ms,
            True,
            text_length=len(text),
            audio_size=len(audio),
            model=payload["model_id"],
        )
        return audio

    async def get_voices(self) -> Dict[str, Any]:
        """List the voices available to the configured account."""
        try:
            response = await asyncio.to_thread(
                requests.get,
                f"{self.base_url}/v1/voices",
                headers={"xi-api-key": self.api_key or ""},
                timeout=self.timeout,
            )
            response.raise_for_status()
            voices = response.json().get("voices", [])
            return {"success": True, "voices": voices, "total": len(voices)}
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Failed to get voices: {e}")
            return {"success": False, "error": str(e)}

    async def test_connection(self) -> Dict[str, Any]:
        """Synthesise a short phrase to verify the API key and voice."""
        start_time = time.perf_counter()
        try:
            audio = await self.synthesize("ElevenLabs connection test successful!")
        except SynthesisError as e:
            return {"success": False, "error": str(e)}
        return {
            "success": True,
            "message": "ElevenLabs TTS working correctly",
            "audioSize": len(audio),
            "duration": round((time.perf_counter() - start_time) * 1000),
            "voiceId": self.voice_id,
            "model": self.model,
        }


def _error_detail(response) -> str:
    try:
        detail = response.json().get("detail", "Unknown error")
    except (ValueError, AttributeError):
        return "Unknown error"
    if isinstance(detail, dict):
        return detail.get("message", "Unknown error")
    return str(detail)
