"""
Voice module interfaces.

The VoiceSequencer depends only on these protocols, so any speech
backend or audio sink can be plugged in.
"""

from typing import Protocol, Optional, runtime_checkable


@runtime_checkable
class ISpeechSynthesizer(Protocol):
    """Turns text into audio bytes."""

    async def synthesize(self, text: str, voice_id: str) -> Optional[bytes]:
        """
        Synthesize speech for the given text.

        Returns:
            Audio bytes, or None if speech is unavailable for this text
        """
        ...


@runtime_checkable
class IAudioPlayer(Protocol):
    """
    Exclusive audio playback handle.

    At most one clip plays at a time; starting a new clip releases the
    previous one first.
    """

    @property
    def is_playing(self) -> bool:
        ...

    async def play(self, audio: bytes) -> None:
        """
        Play a clip and return when playback ends or is stopped.

        Raises:
            AudioPlaybackError: If the clip cannot be played
        """
        ...

    async def stop(self) -> None:
        """Halt playback immediately and release the audio resource."""
        ...
