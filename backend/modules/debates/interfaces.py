"""
Debates module interfaces.

The API layer and the terminal client depend on ILiveDebateService for
all live debate operations. Persistence of debate outcomes sits behind
IReportStore so the service can be exercised without a database.
"""

from typing import Protocol, Optional, AsyncIterator, runtime_checkable

from .models import (
    FinalReport,
    LiveDebateEvent,
    LiveDebateRequest,
)
from .session import DebateSession


@runtime_checkable
class IReportStore(Protocol):
    """Persistence collaborator for consensus outcomes."""

    def save_consensus(
        self,
        project_id: str,
        score: float,
        verdict: str,
        transcript: Optional[str] = None,
    ) -> FinalReport:
        """
        Persist a consensus reached by the judges.

        Raises:
            ReportPersistenceError: If the write fails
        """
        ...

    def get_latest_report(self, project_id: str) -> Optional[FinalReport]:
        """Return the most recent report for a project, if any."""
        ...


@runtime_checkable
class ILiveDebateService(Protocol):
    """
    Interface for live debate operations.

    This protocol defines the contract that the debates module exposes
    to the API layer and the terminal client.
    """

    def create_session(self, request: LiveDebateRequest) -> DebateSession:
        """
        Create and register a session for a new live debate.

        The session can be aborted by ID until its stream finishes.
        """
        ...

    def start_debate_stream(
        self,
        session: DebateSession,
    ) -> AsyncIterator[LiveDebateEvent]:
        """
        Run the live debate and stream events.

        This is the main entry point for debate execution. It:
        1. Streams the debate from the debate endpoint
        2. Yields a messages_updated event whenever the list changes
        3. Persists the consensus at most once
        4. Finishes with a completed, aborted or failed event

        Args:
            session: Session created by create_session()

        Yields:
            LiveDebateEvent objects for each update
        """
        ...

    def abort_session(self, session_id: str) -> DebateSession:
        """
        Abort a running debate.

        Raises:
            DebateSessionNotFoundError: If no such session is running
        """
        ...

    def get_final_report(self, project_id: str) -> FinalReport:
        """
        Get the latest final report for a project.

        Raises:
            ReportNotFoundError: If no report exists
        """
        ...
