"""
Debates module exceptions.
"""

from typing import Optional

from shared.exceptions import (
    JudgeGPTError,
    NotFoundError,
    ExternalServiceError,
)


class DebateError(JudgeGPTError):
    """Base exception for debate-related errors."""

    pass


class DebateStreamError(ExternalServiceError):
    """Raised when the streaming debate endpoint fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: str = "DEBATE_STREAM_FAILED",
    ):
        super().__init__(
            f"Debate stream failed: {message}",
            service="debate_stream",
            code=code,
            details={"status_code": status_code},
        )
        self.status_code = status_code


class DebateRateLimitedError(DebateStreamError):
    """Raised when the debate endpoint rejects the request with 429."""

    def __init__(self):
        super().__init__(
            "Rate limited, please try again shortly.",
            status_code=429,
            code="DEBATE_RATE_LIMITED",
        )


class DebateCreditsExhaustedError(DebateStreamError):
    """Raised when the debate endpoint rejects the request with 402."""

    def __init__(self):
        super().__init__(
            "AI credits exhausted.",
            status_code=402,
            code="DEBATE_CREDITS_EXHAUSTED",
        )


class DebateSessionNotFoundError(NotFoundError):
    """Raised when a live debate session is not found."""

    def __init__(self, session_id: str):
        super().__init__(
            f"Debate session not found: {session_id}",
            code="DEBATE_SESSION_NOT_FOUND",
            details={"session_id": session_id},
        )


class ReportNotFoundError(NotFoundError):
    """Raised when no final report exists for a project."""

    def __init__(self, project_id: str):
        super().__init__(
            f"Final report not found for project: {project_id}",
            code="REPORT_NOT_FOUND",
            details={"project_id": project_id},
        )


class ReportPersistenceError(DebateError):
    """Raised when a final report cannot be written."""

    def __init__(self, project_id: str, original_error: Optional[str] = None):
        super().__init__(
            f"Failed to save final report for project: {project_id}",
            code="REPORT_PERSISTENCE_FAILED",
            details={
                "project_id": project_id,
                "original_error": original_error,
            },
        )
