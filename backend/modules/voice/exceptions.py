"""
Voice module exceptions.

Voice failures are local: the sequencer logs them and moves on to the
next message.
"""

from typing import Optional

from shared.exceptions import JudgeGPTError, ExternalServiceError


class VoiceError(JudgeGPTError):
    """Base exception for voice-related errors."""

    pass


class SpeechUnavailableError(ExternalServiceError):
    """Raised when the text-to-speech endpoint cannot produce audio."""

    def __init__(self, voice_id: str, status_code: Optional[int] = None):
        super().__init__(
            f"Speech unavailable for voice: {voice_id}",
            service="tts",
            code="SPEECH_UNAVAILABLE",
            details={"voice_id": voice_id, "status_code": status_code},
        )


class AudioPlaybackError(VoiceError):
    """Raised when the audio player fails to play a clip."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(
            f"Audio playback failed: {message}",
            code="AUDIO_PLAYBACK_FAILED",
            details={"returncode": returncode},
        )
