"""
Voice module data models.
"""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class Judge(BaseModel):
    """A debate participant and the voice it speaks with."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Judge display name")
    type: str = Field(..., description="Stable judge identifier (e.g. 'technical')")
    role: str = Field(..., description="What the judge evaluates")
    voice_id: str = Field(..., description="Text-to-speech voice ID")
    initials: str = Field(..., description="Avatar initials")


class SequencerState(str, Enum):
    """Voice sequencer state."""

    IDLE = "idle"          # Nothing left to speak
    SPEAKING = "speaking"  # Playing (or synthesizing) a message
    MUTED = "muted"        # Paused; cursor holds until unmuted
    STOPPED = "stopped"    # Terminal until reset()
