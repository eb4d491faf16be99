"""
Storage for synthesised audio files served to Twilio.

Twilio plays a reply by fetching it from a URL, so synthesised audio is written to
a local directory that the FastAPI app mounts under /audio. The store hands back
the public URL of each file; the orchestrator treats it as an opaque reference.
"""

import asyncio
import logging
import re
import time
from pathlib import Path

from call_assistant.config.constants import (
    AUDIO_MAX_AGE_HOURS,
    AUDIO_URL_PREFIX,
    LOGGER_NAME,
)
from call_assistant.errors import SynthesisError

logger = logging.getLogger(LOGGER_NAME)

UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


class AudioFileStore:
    """Writes audio to disk and exposes it at a fetchable URL."""

    def __init__(self, audio_dir: str | Path, public_base_url: str):
        self.audio_dir = Path(audio_dir)
        self.public_base_url = public_base_url.rstrip("/")
        self.audio_dir.mkdir(parents=True, exist_ok=True)

    async def save(self, call_id: str, turn_index: int, audio: bytes) -> str:
        """
        Write an audio payload for a call and return its public URL.

        Raises:
            SynthesisError: If the file cannot be written
        """
        safe_call_id = UNSAFE_FILENAME_CHARS.sub("_", call_id)
        filename = f"{safe_call_id}_{turn_index}_{int(time.time() * 1000)}.mp3"
        path = self.audio_dir / filename
        try:
            await asyncio.to_thread(path.write_bytes, audio)
        except OSError as e:
            logger.error(f"Failed to save audio file for call {call_id}: {e}")
            raise SynthesisError(f"Failed to save audio file: {e}") from e

        url = f"{self.public_base_url}{AUDIO_URL_PREFIX}/{filename}"
        logger.debug(f"Audio file saved: {filename} ({len(audio)} bytes) -> {url}")
        return url

    def cleanup_old_files(self, max_age_hours: float = AUDIO_MAX_AGE_HOURS) -> int:
        """Delete audio files older than max_age_hours. Returns the number deleted."""
        cutoff = time.time() - max_age_hours * 60 * 60
        deleted = 0
        try:
            for path in self.audio_dir.glob("*.mp3"):
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    deleted += 1
        except OSError as e:
            logger.error(f"Failed to clean up audio files: {e}")
            return deleted

        if deleted:
            logger.info(f"Cleaned up {deleted} old audio files")
        return deleted
