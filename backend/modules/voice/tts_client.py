"""
Client for the text-to-speech endpoint.

The endpoint takes `{text, voiceId}` and answers with an audio payload.
Any failure means "no voice for this message"; it is never fatal.
"""

import logging
from typing import Optional

import httpx

from shared.config import get_settings

from .exceptions import SpeechUnavailableError
from .interfaces import ISpeechSynthesizer

logger = logging.getLogger(__name__)


class TextToSpeechClient(ISpeechSynthesizer):
    """Synthesizes speech over HTTP."""

    def __init__(
        self,
        url: str,
        api_key: str = "",
        timeout: float = 30.0,
    ):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    async def _fetch_audio(self, text: str, voice_id: str) -> bytes:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.url,
                json={"text": text, "voiceId": voice_id},
                headers=headers,
            )
        if not response.is_success or not response.content:
            raise SpeechUnavailableError(voice_id, response.status_code)
        return response.content

    async def synthesize(self, text: str, voice_id: str) -> Optional[bytes]:
        """
        Synthesize speech for the given text.

        Returns:
            Audio bytes, or None if the endpoint is unconfigured or fails
        """
        if not self.is_configured:
            logger.debug("TTS endpoint not configured, skipping speech")
            return None

        try:
            return await self._fetch_audio(text, voice_id)
        except SpeechUnavailableError as e:
            logger.warning(f"TTS returned {e.details['status_code']} for voice {voice_id}")
        except httpx.HTTPError as e:
            logger.warning(f"TTS request failed for voice {voice_id}: {e}")
        return None


_client_instance: Optional[TextToSpeechClient] = None


def get_tts_client() -> TextToSpeechClient:
    """Get the text-to-speech client singleton built from settings."""
    global _client_instance
    if _client_instance is None:
        settings = get_settings()
        _client_instance = TextToSpeechClient(
            url=settings.tts_url,
            api_key=settings.tts_api_key,
            timeout=settings.tts_timeout,
        )
    return _client_instance


def reset_tts_client() -> None:
    """Reset the text-to-speech client singleton (for testing)."""
    global _client_instance
    _client_instance = None
