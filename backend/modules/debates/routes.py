"""
Live debate API endpoints.

Provides the SSE endpoint that streams a live judge debate, an abort
endpoint for running debates, and read access to saved final reports.
"""

from fastapi import APIRouter, Depends, HTTPException
from sse_starlette.sse import EventSourceResponse

from api.dependencies import get_live_debate_service

from .interfaces import ILiveDebateService
from .models import FinalReport, LiveDebateRequest
from .exceptions import DebateSessionNotFoundError, ReportNotFoundError
from .session import DebateSession

router = APIRouter()


async def event_generator(
    session: DebateSession,
    service: ILiveDebateService,
):
    """
    Generate SSE events for a live debate.

    Yields events in the format:
        event: <event_type>
        data: <json_data>
    """
    try:
        async for event in service.start_debate_stream(session):
            yield {
                "event": event.type.value,
                "data": event.model_dump_json(exclude_none=True),
            }
    finally:
        # Client went away: stop reading the upstream stream
        if not session.finished:
            session.abort()


@router.post("/live")
async def stream_live_debate(
    request: LiveDebateRequest,
    service: ILiveDebateService = Depends(get_live_debate_service),
):
    """
    Start a live judge debate and stream it via SSE.

    Event format:
        event: <event_type>
        data: {"type": "<type>", "session_id": "...", "timestamp": "...", ...}

    Event types (from LiveDebateEventType):

    Lifecycle:
    - debate_started: Stream opened; carries the session_id used for aborting
    - debate_completed: Stream finished
    - debate_aborted: Stream stopped by an abort request
    - debate_failed: The debate endpoint failed

    Content:
    - messages_updated: Full ordered message list (replaces the previous one)
    - consensus_reached: Judges agreed on a final score
    - report_saved: Final report persisted

    Error:
    - error: Non-fatal error occurred (e.g. report could not be saved)
    """
    session = service.create_session(request)
    return EventSourceResponse(
        event_generator(session, service),
        media_type="text/event-stream",
    )


@router.post("/live/{session_id}/abort", status_code=202)
async def abort_live_debate(
    session_id: str,
    service: ILiveDebateService = Depends(get_live_debate_service),
) -> dict[str, str]:
    """
    Abort a running live debate.

    Cancellation is cooperative: the stream stops at its next chunk.
    """
    try:
        session = service.abort_session(session_id)
    except DebateSessionNotFoundError:
        raise HTTPException(status_code=404, detail="Debate session not found")
    return {"session_id": session.session_id, "status": "aborting"}


@router.get("/reports/{project_id}", response_model=FinalReport)
async def get_final_report(
    project_id: str,
    service: ILiveDebateService = Depends(get_live_debate_service),
) -> FinalReport:
    """
    Get the latest final report saved for a project.
    """
    try:
        return service.get_final_report(project_id)
    except ReportNotFoundError:
        raise HTTPException(status_code=404, detail="Final report not found")
