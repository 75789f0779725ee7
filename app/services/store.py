"""Supabase-backed job posting and candidate stores.

Reads go through PostgREST table queries; the join commit and interview
submission are PL/pgSQL functions called with ``client.rpc`` so that the
row lock, status check, update and counter increment share one transaction.
Any PostgREST / transport failure is surfaced as ``StorageUnavailable``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import httpx
from postgrest.exceptions import APIError

from app.core.constants import (
    CANDIDATES_TABLE,
    COMMIT_JOIN_RPC,
    JOB_POST_WITH_QUESTIONS_SELECT,
    JOB_POSTS_TABLE,
    SUBMIT_INTERVIEW_RPC,
)
from app.core.exceptions import (
    AccessDenied,
    AlreadyCompleted,
    CandidateNotFound,
    InvalidStatusTransition,
    StorageUnavailable,
)
from app.db.supabase import get_supabase
from app.models.access import JoinCommit
from app.models.candidate import Candidate
from app.models.enums import CandidateStatus
from app.models.job_post import InterviewQuestion, JobPost
from app.models.submission import SubmissionRequest, SubmissionResult

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Translate PostgREST / network failures into ``StorageUnavailable``."""
    try:
        yield
    except (APIError, httpx.HTTPError) as exc:
        logger.error(
            "storage_call_failed",
            extra={"operation": operation, "error_message": str(exc)},
            exc_info=True,
        )
        raise StorageUnavailable() from exc


def rpc_row(data: Any) -> dict[str, Any]:
    """RPC results arrive as a dict or a one-element list depending on version."""
    if isinstance(data, list):
        return data[0] if data else {}
    return data or {}


def parse_job_post(row: dict[str, Any]) -> JobPost:
    """Build a ``JobPost`` from a row with embedded questions."""
    questions = [
        InterviewQuestion(
            **{k: v for k, v in q.items() if k != "interview_answer_points"},
            answer_points=[
                ap["answer_point"]
                for ap in q.get("interview_answer_points") or []
                if ap.get("answer_point")
            ],
        )
        for q in row.get("interview_questions") or []
    ]
    fields = {k: v for k, v in row.items() if k != "interview_questions"}
    if fields.get("location") is None:
        fields["location"] = []
    elif isinstance(fields["location"], str):
        fields["location"] = [fields["location"]]
    return JobPost(**fields, questions=questions)


class SupabaseInterviewStore:
    """Implements ``JobPostStore`` and ``CandidateStore`` on Supabase."""

    def __init__(self, client_factory: Callable[[], Any] = get_supabase) -> None:
        self._client_factory = client_factory

    @property
    def client(self) -> Any:
        return self._client_factory()

    # --- job posts ---

    def get_job_post(self, job_post_id: int) -> JobPost | None:
        with storage_errors("get_job_post"):
            result = (
                self.client.table(JOB_POSTS_TABLE)
                .select(JOB_POST_WITH_QUESTIONS_SELECT)
                .eq("id", job_post_id)
                .limit(1)
                .execute()
            )
        rows = result.data or []
        if not rows:
            return None
        return parse_job_post(rows[0])

    # --- candidates ---

    def find_candidate(self, job_post_id: int, email: str) -> Candidate | None:
        with storage_errors("find_candidate"):
            result = (
                self.client.table(CANDIDATES_TABLE)
                .select("*")
                .eq("job_post_id", job_post_id)
                .eq("email", email.lower())
                .limit(1)
                .execute()
            )
        rows = result.data or []
        return Candidate(**rows[0]) if rows else None

    def get_candidate(self, candidate_id: int) -> Candidate | None:
        with storage_errors("get_candidate"):
            result = (
                self.client.table(CANDIDATES_TABLE)
                .select("*")
                .eq("id", candidate_id)
                .limit(1)
                .execute()
            )
        rows = result.data or []
        return Candidate(**rows[0]) if rows else None

    def commit_join(
        self,
        candidate_id: int,
        job_post_id: int,
        patch: dict[str, Any],
    ) -> JoinCommit:
        """Run ``commit_interview_join`` and interpret its outcome."""
        with storage_errors("commit_join"):
            result = self.client.rpc(
                COMMIT_JOIN_RPC,
                {
                    "p_candidate_id": candidate_id,
                    "p_job_post_id": job_post_id,
                    "p_profile": patch,
                },
            ).execute()

        row = rpc_row(result.data)
        outcome = row.get("outcome")
        if outcome == "already_completed":
            raise AlreadyCompleted()
        if outcome == "not_found":
            # removed from the roster after the lookup
            raise AccessDenied()
        if outcome not in ("joined", "rejoined"):
            logger.error(
                "commit_join_unexpected_outcome",
                extra={"candidate_id": candidate_id, "outcome": outcome},
            )
            raise StorageUnavailable()

        return JoinCommit(
            candidate=Candidate(**row["candidate"]),
            applicants=int(row.get("applicants", 0)),
            first_join=outcome == "joined",
        )

    def submit_interview(
        self,
        candidate_id: int,
        submission: SubmissionRequest,
    ) -> SubmissionResult:
        """Run ``submit_interview``: answers, summary and status in one unit."""
        summary = submission.model_dump(
            mode="json", exclude={"status", "answers"}, exclude_none=True
        )
        with storage_errors("submit_interview"):
            result = self.client.rpc(
                SUBMIT_INTERVIEW_RPC,
                {
                    "p_candidate_id": candidate_id,
                    "p_status": submission.status,
                    "p_answers": [a.model_dump(mode="json") for a in submission.answers],
                    "p_summary": summary,
                },
            ).execute()

        row = rpc_row(result.data)
        outcome = row.get("outcome")
        if outcome == "not_found":
            raise CandidateNotFound()
        if outcome == "invalid_transition":
            raise InvalidStatusTransition(
                row.get("current_status", "unknown"), submission.status
            )
        if outcome != "submitted":
            raise StorageUnavailable()

        return SubmissionResult(
            candidate_id=candidate_id,
            status=CandidateStatus(submission.status),
            interviews=int(row.get("interviews", 0)),
        )
