"""
Audio playback through an external player process.

Audio bytes are piped to a command such as
`ffplay -nodisp -autoexit -loglevel quiet -`. The player owns a single
process at a time; starting a clip stops whatever was playing.
"""

import asyncio
import logging
from typing import Optional

from .exceptions import AudioPlaybackError
from .interfaces import IAudioPlayer

logger = logging.getLogger(__name__)


class SubprocessAudioPlayer(IAudioPlayer):
    """Exclusive audio playback handle backed by a subprocess."""

    def __init__(self, command: list[str]):
        if not command:
            raise ValueError("Audio player command must not be empty")
        self.command = list(command)
        self._process: Optional[asyncio.subprocess.Process] = None
        self._terminated: set[int] = set()
        # Bumped by every stop(); a spawn that sees it change was cancelled
        self._generation = 0
        self._spawn_lock = asyncio.Lock()

    @property
    def is_playing(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def play(self, audio: bytes) -> None:
        """
        Play a clip and return when playback ends or is stopped.

        A stop() that arrives while the player process is still starting
        cancels the clip before any audio is written.

        Raises:
            AudioPlaybackError: If the player cannot start or exits
                with an error that stop() did not cause
        """
        async with self._spawn_lock:
            await self.stop()
            generation = self._generation

            try:
                process = await asyncio.create_subprocess_exec(
                    *self.command,
                    stdin=asyncio.subprocess.PIPE,
                    stdout=asyncio.subprocess.DEVNULL,
                    stderr=asyncio.subprocess.DEVNULL,
                )
            except OSError as e:
                raise AudioPlaybackError(f"cannot start {self.command[0]}: {e}") from e

            if generation != self._generation:
                await self._terminate(process)
                self._terminated.discard(process.pid)
                return
            self._process = process

        try:
            try:
                process.stdin.write(audio)
                await process.stdin.drain()
                process.stdin.close()
            except (BrokenPipeError, ConnectionResetError):
                # Player exited before reading everything; its exit code decides
                pass
            returncode = await process.wait()
        finally:
            if self._process is process:
                self._process = None

        stopped = process.pid in self._terminated
        self._terminated.discard(process.pid)
        if returncode != 0 and not stopped:
            raise AudioPlaybackError("player exited with an error", returncode)

    async def stop(self) -> None:
        """Halt playback immediately and release the player process."""
        self._generation += 1
        process = self._process
        if process is None:
            return
        self._process = None
        await self._terminate(process)

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        self._terminated.add(process.pid)
        try:
            process.terminate()
        except ProcessLookupError:
            pass
        await process.wait()
        logger.debug(f"Stopped audio player (pid {process.pid})")
