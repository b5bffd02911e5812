"""
Sequential voice playback for a growing list of debate messages.

The sequencer speaks messages strictly in list order, one at a time. It
owns the playback cursor (`spoken_count`): the number of messages whose
playback finished or was skipped. The cursor only moves forward, except
on reset(), and never passes the end of the list.

States:
    idle      nothing left to speak
    speaking  synthesizing or playing message `spoken_count`
    muted     paused; the interrupted message still counts as spoken
    stopped   terminal until reset()
"""

import asyncio
import logging
from typing import Optional

from modules.debates.models import DebateMessage
from shared.exceptions import JudgeGPTError

from .exceptions import AudioPlaybackError
from .interfaces import IAudioPlayer, ISpeechSynthesizer
from .models import SequencerState
from .profiles import VoiceProfileResolver

logger = logging.getLogger(__name__)


class VoiceSequencer:
    """Plays synthesized speech for each message in arrival order."""

    def __init__(
        self,
        synthesizer: ISpeechSynthesizer,
        player: IAudioPlayer,
        resolver: Optional[VoiceProfileResolver] = None,
        pause_seconds: float = 0.4,
    ):
        self._synthesizer = synthesizer
        self._player = player
        self._resolver = resolver or VoiceProfileResolver()
        self.pause_seconds = pause_seconds

        self._messages: list[DebateMessage] = []
        self._spoken_count = 0
        self._busy = False
        self._muted = False
        self._stopped = False
        self._task: Optional[asyncio.Task] = None
        self._idle = asyncio.Event()
        self._idle.set()
        self._stop_event = asyncio.Event()

    @property
    def spoken_count(self) -> int:
        return self._spoken_count

    @property
    def muted(self) -> bool:
        return self._muted

    @property
    def state(self) -> SequencerState:
        if self._stopped:
            return SequencerState.STOPPED
        if self._muted:
            return SequencerState.MUTED
        if self._busy:
            return SequencerState.SPEAKING
        return SequencerState.IDLE

    def update(self, messages: list[DebateMessage]) -> None:
        """
        Take the latest full message list and speak anything new.

        New messages never preempt the one being spoken; they are picked
        up when the loop advances. Must be called from the event loop.
        """
        if self._stopped:
            return
        if len(messages) < len(self._messages):
            logger.debug("Ignoring shorter message list (%d < %d)", len(messages), len(self._messages))
            return
        self._messages = list(messages)
        self._kick()

    async def set_muted(self, muted: bool) -> None:
        """
        Mute or unmute.

        Muting stops the current clip at once. The interrupted message is
        treated as spoken. Unmuting resumes from the cursor.
        """
        if muted == self._muted:
            return
        self._muted = muted
        if muted:
            await self._player.stop()
        else:
            self._kick()

    async def stop(self) -> None:
        """Halt playback and prevent any further advancement."""
        self._stopped = True
        self._stop_event.set()
        await self._player.stop()

    async def drain(self) -> None:
        """Wait until the loop has nothing left to speak (or is halted)."""
        await self._idle.wait()

    async def reset(self) -> None:
        """Stop, then clear all state for a new debate session."""
        await self.stop()
        await self.drain()
        self._messages = []
        self._spoken_count = 0
        self._stopped = False
        self._stop_event.clear()

    def _kick(self) -> None:
        if self._busy or self._stopped or self._muted:
            return
        if self._spoken_count >= len(self._messages):
            return
        self._busy = True
        self._idle.clear()
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        try:
            while (
                not self._stopped
                and not self._muted
                and self._spoken_count < len(self._messages)
            ):
                index = self._spoken_count
                await self._speak(self._messages[index])
                if self._stopped:
                    break
                self._spoken_count = index + 1
                if not self._muted:
                    await self._pause()
        finally:
            self._busy = False
            self._task = None
            self._idle.set()

    async def _pause(self) -> None:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self.pause_seconds)
        except asyncio.TimeoutError:
            pass

    async def _speak(self, message: DebateMessage) -> None:
        voice_id = self._resolver.resolve(message)
        if voice_id is None:
            logger.debug(f"No voice profile for speaker {message.speaker!r}, skipping")
            return

        try:
            audio = await self._synthesizer.synthesize(message.message, voice_id)
        except JudgeGPTError as e:
            logger.warning(f"Speech synthesis failed for {message.speaker!r}: {e.message}")
            return

        if audio is None or self._stopped or self._muted:
            return

        try:
            await self._player.play(audio)
        except AudioPlaybackError as e:
            logger.warning(f"Playback failed for {message.speaker!r}: {e.message}")
