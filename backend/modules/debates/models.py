"""
Debates module data models.

These models define the data structures for the live judge debate:
the request sent to the streaming debate endpoint, the debate messages
parsed out of the stream, and the events relayed to clients over SSE.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, Field


# Marker carried by the terminal consensus message
FINAL_MESSAGE_TYPE = "final"


class Evaluation(BaseModel):
    """A single judge's scored evaluation of a project."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = Field(None, description="Evaluation ID (UUID)")
    project_id: Optional[str] = Field(None, description="Evaluated project ID")
    judge_name: str = Field(..., description="Judge display name")
    judge_type: str = Field(..., description="Judge type (e.g. 'technical')")
    score: float = Field(..., ge=0, le=10, description="Score out of 10")
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    reasoning: str = Field(default="", description="Judge's reasoning")


class Project(BaseModel):
    """A hackathon submission under evaluation."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Project ID (UUID)")
    name: str = Field(..., min_length=1, description="Project name")
    description: str = Field(default="", description="Project description")
    architecture: str = Field(default="", description="Architecture summary")
    demo_transcript: Optional[str] = Field(None, description="Demo transcript")
    track: Optional[str] = Field(None, description="Hackathon track")
    presentation_url: Optional[str] = None
    website_url: Optional[str] = None
    video_url: Optional[str] = None


class LiveDebateRequest(BaseModel):
    """Request body for the streaming debate endpoint."""

    evaluations: list[Evaluation] = Field(
        ...,
        min_length=1,
        description="Evaluations the judges will debate",
    )
    project: Project = Field(..., description="Project being judged")


class DebateMessage(BaseModel):
    """
    One debate turn parsed from a JSONL line.

    Messages are immutable once published. They have no identifier of
    their own; consumers key them by position in the message list.
    """

    model_config = ConfigDict(frozen=True)

    speaker: str = Field(..., min_length=1, description="Who is speaking")
    type: str = Field(default="", description="Judge type or 'final'")
    message: str = Field(..., min_length=1, description="What they say")
    final_score: Optional[float] = Field(
        None,
        description="Agreed score (consensus message only)",
    )

    @property
    def is_final(self) -> bool:
        """Whether this is the terminal consensus message."""
        return self.type == FINAL_MESSAGE_TYPE


class ConsensusEvent(BaseModel):
    """Consensus reached by the judges."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(..., gt=0, description="Final agreed score")
    message: str = Field(..., description="Consensus statement")


@dataclass(frozen=True)
class StreamFrame:
    """
    One decoded Server-Sent-Events line.

    Frames are transient: they are discarded once their delta
    has been extracted.
    """

    raw_line: str
    payload: Optional[dict[str, Any]] = None
    is_terminal: bool = False
    is_incomplete: bool = False
    is_malformed: bool = False


class FinalReport(BaseModel):
    """Persisted outcome of a live debate."""

    id: str = Field(..., description="Report ID (UUID)")
    project_id: str = Field(..., description="Judged project ID")
    overall_score: float = Field(..., description="Consensus score")
    verdict: str = Field(..., description="Consensus statement")
    debate_transcript: Optional[str] = Field(None, description="Full debate")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the report was saved",
    )


# SSE Event Types

class LiveDebateEventType(str, Enum):
    """Types of events emitted while a live debate streams."""

    # Lifecycle events
    DEBATE_STARTED = "debate_started"
    DEBATE_COMPLETED = "debate_completed"
    DEBATE_ABORTED = "debate_aborted"
    DEBATE_FAILED = "debate_failed"

    # Content events
    MESSAGES_UPDATED = "messages_updated"  # Full replacement of the list
    CONSENSUS_REACHED = "consensus_reached"
    REPORT_SAVED = "report_saved"

    # Error events
    ERROR = "error"  # Non-fatal


class LiveDebateEvent(BaseModel):
    """
    Event emitted during live debate streaming.

    These events are sent via SSE to the frontend (or consumed directly
    by the terminal client) to render the debate as it arrives.
    """

    type: LiveDebateEventType = Field(..., description="Event type")
    session_id: str = Field(..., description="Debate session ID")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Event timestamp",
    )

    # Optional fields depending on event type
    messages: Optional[list[DebateMessage]] = Field(
        None,
        description="Ordered messages parsed so far (for messages_updated)",
    )
    consensus: Optional[ConsensusEvent] = Field(
        None,
        description="Consensus (for consensus_reached)",
    )
    report: Optional[FinalReport] = Field(
        None,
        description="Saved report (for report_saved)",
    )
    progress: Optional[dict[str, Any]] = Field(None, description="Progress info")
    error: Optional[str] = Field(None, description="Error message")

    def to_sse(self) -> str:
        """Convert to SSE format."""
        data = self.model_dump(mode="json", exclude_none=True)
        return f"event: {self.type.value}\ndata: {json.dumps(data)}\n\n"
