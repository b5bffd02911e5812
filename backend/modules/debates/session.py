"""
Live debate session state.

A DebateSession is created by whoever starts a debate and passed to
every stage that needs it. Ownership is explicit:
- the parser's DeltaAccumulator is the only writer of the text buffer
- the stream adapter is the only writer of the consensus guard
- anyone holding the session may request an abort
"""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Optional

from .models import DebateMessage, LiveDebateRequest
from .stream_parser import DebateStreamParser


class DebateSession:
    """State for one live debate, from request until the stream ends."""

    def __init__(
        self,
        request: LiveDebateRequest,
        parser: Optional[DebateStreamParser] = None,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.request = request
        self.parser = parser or DebateStreamParser()
        self.created_at = datetime.now(timezone.utc)

        self.consensus_emitted = False
        self.finished = False
        self._abort_event = asyncio.Event()

    @property
    def project_id(self) -> str:
        return self.request.project.id

    @property
    def messages(self) -> list[DebateMessage]:
        """The published message list (replaced, never mutated)."""
        return self.parser.messages

    @property
    def full_text(self) -> str:
        return self.parser.full_text

    @property
    def done(self) -> bool:
        """Whether the stream sent its terminal frame."""
        return self.parser.done

    @property
    def malformed_frames(self) -> int:
        return self.parser.malformed_frames

    @property
    def aborted(self) -> bool:
        return self._abort_event.is_set()

    def abort(self) -> None:
        """
        Request cooperative cancellation.

        Takes effect at the next point where the stream adapter checks
        the session, not instantly.
        """
        self._abort_event.set()

    async def wait_aborted(self) -> None:
        await self._abort_event.wait()

    def transcript(self) -> str:
        """Render the published messages as `Speaker: message` lines."""
        return "\n".join(f"{m.speaker}: {m.message}" for m in self.messages)
