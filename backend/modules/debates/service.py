"""
Live debate service implementation.

Runs live judge debates through the DebateStreamAdapter, keeps a registry
of running sessions so they can be aborted, and persists each debate's
consensus to Supabase at most once.
"""

import logging
from typing import Optional, AsyncIterator, Callable

from .exceptions import (
    DebateSessionNotFoundError,
    ReportNotFoundError,
    ReportPersistenceError,
)
from .gateway import DebateGatewayClient
from .interfaces import ILiveDebateService, IReportStore
from .models import (
    ConsensusEvent,
    FinalReport,
    LiveDebateEvent,
    LiveDebateEventType,
    LiveDebateRequest,
)
from .session import DebateSession
from .stream_adapter import DebateStreamAdapter
from .stream_parser import DebateStreamParser

logger = logging.getLogger(__name__)


class LiveDebateService(ILiveDebateService):
    """
    Live debate service.

    Implements ILiveDebateService. The report store is optional; without
    one, consensus is still relayed but nothing is persisted.
    """

    def __init__(
        self,
        gateway: DebateGatewayClient,
        reports: Optional[IReportStore] = None,
        max_frame_retries: int = 3,
        max_pending_frame_bytes: int = 65536,
    ):
        self._gateway = gateway
        self._reports = reports
        self._max_frame_retries = max_frame_retries
        self._max_pending_frame_bytes = max_pending_frame_bytes
        self._sessions: dict[str, DebateSession] = {}

    @property
    def active_sessions(self) -> list[str]:
        return list(self._sessions)

    def create_session(self, request: LiveDebateRequest) -> DebateSession:
        """Create and register a session for a new live debate."""
        session = DebateSession(
            request,
            parser=DebateStreamParser(
                max_frame_retries=self._max_frame_retries,
                max_pending_frame_bytes=self._max_pending_frame_bytes,
            ),
        )
        self._sessions[session.session_id] = session
        return session

    async def start_debate_stream(
        self,
        session: DebateSession,
    ) -> AsyncIterator[LiveDebateEvent]:
        """Run the live debate and stream events."""
        self._sessions[session.session_id] = session
        adapter = DebateStreamAdapter(session, self._gateway)
        try:
            async for event in adapter.run():
                yield event
                if event.type == LiveDebateEventType.CONSENSUS_REACHED:
                    follow_up = self._persist_consensus(session, event.consensus)
                    if follow_up is not None:
                        yield follow_up
        finally:
            self._sessions.pop(session.session_id, None)

    def abort_session(self, session_id: str) -> DebateSession:
        """Abort a running debate."""
        session = self._sessions.get(session_id)
        if session is None:
            raise DebateSessionNotFoundError(session_id)
        session.abort()
        return session

    def get_final_report(self, project_id: str) -> FinalReport:
        """Get the latest final report for a project."""
        report = self._reports.get_latest_report(project_id) if self._reports else None
        if report is None:
            raise ReportNotFoundError(project_id)
        return report

    def _persist_consensus(
        self,
        session: DebateSession,
        consensus: Optional[ConsensusEvent],
    ) -> Optional[LiveDebateEvent]:
        """Save the consensus once, returning a follow-up event if any."""
        if consensus is None or self._reports is None or session.aborted:
            return None

        try:
            report = self._reports.save_consensus(
                project_id=session.project_id,
                score=consensus.score,
                verdict=consensus.message,
                transcript=session.transcript(),
            )
        except ReportPersistenceError as e:
            logger.error(f"Report save failed for session {session.session_id}: {e.message}")
            return LiveDebateEvent(
                type=LiveDebateEventType.ERROR,
                session_id=session.session_id,
                error=e.message,
            )

        logger.info(
            f"Saved final report {report.id} for project {session.project_id} "
            f"(score {consensus.score})"
        )
        return LiveDebateEvent(
            type=LiveDebateEventType.REPORT_SAVED,
            session_id=session.session_id,
            report=report,
        )


async def run_live_debate(
    service: ILiveDebateService,
    session: DebateSession,
    on_messages: Callable[[list], None],
    on_consensus: Optional[Callable[[ConsensusEvent], None]] = None,
) -> Optional[LiveDebateEvent]:
    """
    Run a debate to completion, calling render callbacks along the way.

    Returns:
        The final lifecycle event (completed, aborted or failed)
    """
    last_event: Optional[LiveDebateEvent] = None
    async for event in service.start_debate_stream(session):
        last_event = event
        if event.type == LiveDebateEventType.MESSAGES_UPDATED and event.messages is not None:
            on_messages(event.messages)
        elif event.type == LiveDebateEventType.CONSENSUS_REACHED and on_consensus:
            on_consensus(event.consensus)
    return last_event


def build_report_store(settings) -> Optional[IReportStore]:
    """
    Build the final report store from settings.

    Returns None when persistence is disabled or Supabase is not
    configured; debates then run without saving their outcome.
    """
    if not settings.enable_report_persistence:
        return None
    if not settings.supabase_url or not settings.supabase_service_role_key:
        logger.warning("Supabase is not configured; final reports will not be saved")
        return None

    from shared.database import get_supabase_client
    from .repository import FinalReportRepository
    return FinalReportRepository(get_supabase_client())


# Module-level instance getter
_service_instance: Optional[LiveDebateService] = None


def get_live_debate_service() -> LiveDebateService:
    """Get the live debate service singleton."""
    global _service_instance
    if _service_instance is None:
        from shared.config import get_settings
        from .gateway import get_gateway_client

        settings = get_settings()
        _service_instance = LiveDebateService(
            gateway=get_gateway_client(),
            reports=build_report_store(settings),
            max_frame_retries=settings.max_frame_retries,
            max_pending_frame_bytes=settings.max_pending_frame_bytes,
        )
    return _service_instance


def reset_live_debate_service() -> None:
    """Reset the live debate service singleton (for testing)."""
    global _service_instance
    _service_instance = None
