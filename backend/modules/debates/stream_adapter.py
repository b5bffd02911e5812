"""
Adapter that runs a live debate stream and yields SSE events.

This adapter reads raw chunks from the streaming debate endpoint,
feeds them through the session's DebateStreamParser and maps the
results to LiveDebateEvent objects:
- messages_updated whenever the published message list changes
- consensus_reached once, when the terminal consensus message appears
- debate_completed / debate_aborted / debate_failed at the end
"""

import asyncio
import logging
from typing import AsyncIterator, Optional

from .exceptions import DebateStreamError
from .gateway import DebateGatewayClient
from .models import (
    DebateMessage,
    LiveDebateEvent,
    LiveDebateEventType,
)
from .session import DebateSession
from .stream_parser import detect_consensus

logger = logging.getLogger(__name__)


class DebateStreamAdapter:
    """
    Drives one DebateSession from the gateway byte stream.

    Chunks are processed strictly in arrival order. Every pending read
    races the session abort, and the flag is checked again after each
    chunk; once abort is observed no further message or consensus
    events are produced.
    """

    def __init__(self, session: DebateSession, gateway: DebateGatewayClient):
        self.session = session
        self.gateway = gateway
        self._last_emitted: list[DebateMessage] = []

    def _event(self, event_type: LiveDebateEventType, **kwargs) -> LiveDebateEvent:
        return LiveDebateEvent(
            type=event_type,
            session_id=self.session.session_id,
            **kwargs,
        )

    async def run(self) -> AsyncIterator[LiveDebateEvent]:
        """Run the debate stream and yield events."""
        session = self.session
        yield self._event(
            LiveDebateEventType.DEBATE_STARTED,
            progress={
                "project_id": session.project_id,
                "evaluations": len(session.request.evaluations),
            },
        )

        try:
            stream = self.gateway.stream(session.request)
            try:
                while (chunk := await self._next_chunk(stream)) is not None:
                    if session.aborted:
                        break
                    for event in self._on_update(session.parser.feed(chunk)):
                        yield event
                    if session.done:
                        break
            finally:
                await stream.aclose()

            if not session.aborted:
                for event in self._on_update(session.parser.close()):
                    yield event

        except DebateStreamError as e:
            logger.warning(f"Live debate {session.session_id} failed: {e.message}")
            session.finished = True
            yield self._event(
                LiveDebateEventType.DEBATE_FAILED,
                error=e.message,
                progress={"message_count": len(session.messages)},
            )
            return
        except Exception as e:
            logger.exception(f"Unexpected error in live debate {session.session_id}")
            session.finished = True
            yield self._event(LiveDebateEventType.DEBATE_FAILED, error=str(e))
            return

        session.finished = True
        progress = {
            "message_count": len(session.messages),
            "consensus_reached": session.consensus_emitted,
            "malformed_frames": session.malformed_frames,
        }
        if session.aborted:
            logger.info(f"Live debate {session.session_id} aborted")
            yield self._event(LiveDebateEventType.DEBATE_ABORTED, progress=progress)
        else:
            yield self._event(LiveDebateEventType.DEBATE_COMPLETED, progress=progress)

    async def _next_chunk(self, stream: AsyncIterator[bytes]) -> Optional[bytes]:
        """
        Wait for the next chunk from the gateway.

        Returns None when the stream ends or the session is aborted while
        the read is pending. An aborted read is cancelled, which closes
        the upstream connection.
        """
        if self.session.aborted:
            return None

        read = asyncio.ensure_future(stream.__anext__())
        aborted = asyncio.ensure_future(self.session.wait_aborted())
        try:
            await asyncio.wait({read, aborted}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            aborted.cancel()
            if not read.done():
                read.cancel()
                await asyncio.wait({read})

        if read.cancelled():
            return None
        try:
            return read.result()
        except StopAsyncIteration:
            return None

    def _on_update(self, replaced: bool) -> list[LiveDebateEvent]:
        """Map a message list replacement to events."""
        if not replaced:
            return []

        events: list[LiveDebateEvent] = []
        messages = self.session.messages

        if messages != self._last_emitted:
            self._last_emitted = messages
            events.append(
                self._event(
                    LiveDebateEventType.MESSAGES_UPDATED,
                    messages=list(messages),
                )
            )

        consensus = detect_consensus(messages)
        if consensus is not None and not self.session.consensus_emitted:
            self.session.consensus_emitted = True
            events.append(
                self._event(
                    LiveDebateEventType.CONSENSUS_REACHED,
                    consensus=consensus,
                )
            )

        return events
