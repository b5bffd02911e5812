"""
Judge roster and speaker-to-voice resolution.

Debate messages carry the judge type in their `type` field, which is the
stable key used to pick a voice. The speaker name is only consulted as an
exact (case-insensitive) match, and the configured default voice covers
speakers with no profile at all, such as the consensus announcer.
"""

from typing import Optional

from modules.debates.models import DebateMessage

from .models import Judge


JUDGES: list[Judge] = [
    Judge(
        name="Dr. Alex Chen",
        type="technical",
        role="Technical Depth",
        voice_id="JBFqnCBsd6RMkjVDRZzb",
        initials="AC",
    ),
    Judge(
        name="Maya Patel",
        type="business",
        role="Business Impact",
        voice_id="EXAVITQu4vr4xnSDxMaL",
        initials="MP",
    ),
    Judge(
        name="Jordan Blake",
        type="product",
        role="Product & UX",
        voice_id="onwK4e9ZLuTAKqWW03F9",
        initials="JB",
    ),
    Judge(
        name="Sam Rodriguez",
        type="risk",
        role="Risk & Safety",
        voice_id="CwhRBWXzGAHq8TQ4Fs17",
        initials="SR",
    ),
    Judge(
        name="Riley Kim",
        type="innovation",
        role="Innovation",
        voice_id="pFZP5JQG7iQjIQuC4Bku",
        initials="RK",
    ),
]


class VoiceProfileResolver:
    """Maps debate messages to voice IDs."""

    def __init__(
        self,
        judges: Optional[list[Judge]] = None,
        default_voice_id: str = "",
    ):
        judges = JUDGES if judges is None else judges
        self._by_type = {j.type.lower(): j for j in judges}
        self._by_name = {j.name.lower(): j for j in judges}
        self.default_voice_id = default_voice_id

    def judge_for(self, message: DebateMessage) -> Optional[Judge]:
        """Return the judge who spoke a message, if known."""
        judge = self._by_type.get(message.type.strip().lower())
        if judge is None:
            judge = self._by_name.get(message.speaker.strip().lower())
        return judge

    def resolve(self, message: DebateMessage) -> Optional[str]:
        """
        Return the voice ID for a message.

        Returns:
            The judge's voice, else the default voice, else None
        """
        judge = self.judge_for(message)
        if judge is not None:
            return judge.voice_id
        return self.default_voice_id or None
