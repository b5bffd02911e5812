"""
Final report repository for database access.

Encapsulates all Supabase queries and data mapping for the
final_reports table, where each live debate's consensus is stored.
"""

from typing import Optional, Any

from shared.repository import BaseRepository
from .exceptions import ReportPersistenceError
from .models import FinalReport


class FinalReportRepository(BaseRepository[FinalReport]):
    """
    Repository for final report data access.

    All methods return Pydantic models with proper mapping from database rows.

    Note: This repository does NOT de-duplicate writes.
    The service layer is responsible for saving at most once per debate.
    """

    def save_consensus(
        self,
        project_id: str,
        score: float,
        verdict: str,
        transcript: Optional[str] = None,
    ) -> FinalReport:
        """
        Insert a final report for a debate's consensus.

        Args:
            project_id: The judged project UUID.
            score: The consensus score.
            verdict: The consensus statement.
            transcript: The debate rendered as text.

        Returns:
            Created FinalReport with generated ID and timestamp.

        Raises:
            ReportPersistenceError: If the insert fails or returns no row.
        """
        data = {
            "project_id": project_id,
            "overall_score": score,
            "verdict": verdict,
            "debate_transcript": transcript,
        }
        try:
            result = self._db.table("final_reports").insert(data).execute()
        except Exception as e:
            raise ReportPersistenceError(project_id, str(e)) from e

        if not result.data:
            raise ReportPersistenceError(project_id, "insert returned no rows")
        return self._map_to_report(result.data[0])

    def get_latest_report(self, project_id: str) -> Optional[FinalReport]:
        """
        Get the most recent final report for a project.

        Args:
            project_id: The judged project UUID.

        Returns:
            FinalReport if one exists, None otherwise.
        """
        result = (
            self._db.table("final_reports")
            .select("*")
            .eq("project_id", project_id)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )

        if not result.data:
            return None
        return self._map_to_report(result.data[0])

    # -------------------------------------------------------------------------
    # Private mapping methods
    # -------------------------------------------------------------------------

    def _map_to_report(self, data: dict[str, Any]) -> FinalReport:
        """Map database row to FinalReport model."""
        return FinalReport(
            id=str(data["id"]),
            project_id=str(data["project_id"]),
            overall_score=float(data["overall_score"]),
            verdict=data.get("verdict") or "",
            debate_transcript=data.get("debate_transcript"),
            created_at=data["created_at"],
        )
