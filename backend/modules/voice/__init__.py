"""
Voice module.

Speaks live debate messages one at a time, in order, with a distinct
voice per judge.

Public API:
- VoiceSequencer: Ordered, non-overlapping playback of debate messages
- VoiceProfileResolver: Maps messages to voice IDs
- TextToSpeechClient: HTTP text-to-speech backend
- SubprocessAudioPlayer: Audio playback through a player command
"""

from .interfaces import IAudioPlayer, ISpeechSynthesizer
from .models import Judge, SequencerState
from .profiles import JUDGES, VoiceProfileResolver
from .player import SubprocessAudioPlayer
from .sequencer import VoiceSequencer
from .tts_client import TextToSpeechClient
from .exceptions import (
    VoiceError,
    SpeechUnavailableError,
    AudioPlaybackError,
)

__all__ = [
    # Interfaces
    "IAudioPlayer",
    "ISpeechSynthesizer",
    # Models
    "Judge",
    "SequencerState",
    "JUDGES",
    # Implementations
    "VoiceProfileResolver",
    "SubprocessAudioPlayer",
    "VoiceSequencer",
    "TextToSpeechClient",
    # Exceptions
    "VoiceError",
    "SpeechUnavailableError",
    "AudioPlaybackError",
]
