"""
Debates module.

Handles live judge debates: streaming, incremental parsing, consensus
detection and final report persistence.

Public API:
- ILiveDebateService: Interface for live debate operations
- DebateSession: State for one running debate
- DebateStreamParser: Bytes-to-messages parsing pipeline
- LiveDebateEvent: SSE event for streaming
- LiveDebateRequest: Request to start a debate
"""

from .interfaces import ILiveDebateService, IReportStore
from .models import (
    ConsensusEvent,
    DebateMessage,
    Evaluation,
    FinalReport,
    LiveDebateEvent,
    LiveDebateEventType,
    LiveDebateRequest,
    Project,
    StreamFrame,
    FINAL_MESSAGE_TYPE,
)
from .session import DebateSession
from .stream_parser import (
    DebateStreamParser,
    DeltaAccumulator,
    LineReassembler,
    decode_frame,
    detect_consensus,
    extract_messages,
)
from .exceptions import (
    DebateError,
    DebateStreamError,
    DebateRateLimitedError,
    DebateCreditsExhaustedError,
    DebateSessionNotFoundError,
    ReportNotFoundError,
    ReportPersistenceError,
)

__all__ = [
    # Interfaces
    "ILiveDebateService",
    "IReportStore",
    # Models
    "ConsensusEvent",
    "DebateMessage",
    "Evaluation",
    "FinalReport",
    "LiveDebateEvent",
    "LiveDebateEventType",
    "LiveDebateRequest",
    "Project",
    "StreamFrame",
    "FINAL_MESSAGE_TYPE",
    # Session and parsing
    "DebateSession",
    "DebateStreamParser",
    "DeltaAccumulator",
    "LineReassembler",
    "decode_frame",
    "detect_consensus",
    "extract_messages",
    # Exceptions
    "DebateError",
    "DebateStreamError",
    "DebateRateLimitedError",
    "DebateCreditsExhaustedError",
    "DebateSessionNotFoundError",
    "ReportNotFoundError",
    "ReportPersistenceError",
]
