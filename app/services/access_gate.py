"""Interview access gate: redeem a token + email for an interview session.

The gate holds no state between calls.  Every check reads the stores, and
the only write (profile merge, status change and applicant increment) is a
single atomic ``commit_join`` on the candidate store.

Checks run in a fixed order so each failure is unambiguous:

1. token signature / expiry
2. job posting exists
3. scheduled start time reached
4. email on the job's allow-list
5. candidate has not already submitted
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any, Protocol

from app.core.constants import PROFILE_FIELDS
from app.core.exceptions import (
    AccessDenied,
    AlreadyCompleted,
    JobNotFound,
    NotYetOpen,
)
from app.core.logging import mask_email
from app.models.access import JoinCommit, JoinResult, TokenClaims
from app.models.candidate import Candidate, ProfileUpdates
from app.models.enums import CandidateStatus
from app.models.job_post import CandidateQuestion, JobPost, JobPostPreview
from app.services.tokens import utcnow

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------

class TokenVerifier(Protocol):
    def verify(self, token: str, now: datetime | None = None) -> TokenClaims: ...


class JobPostStore(Protocol):
    def get_job_post(self, job_post_id: int) -> JobPost | None: ...


class CandidateStore(Protocol):
    def find_candidate(self, job_post_id: int, email: str) -> Candidate | None: ...

    def commit_join(
        self,
        candidate_id: int,
        job_post_id: int,
        patch: dict[str, Any],
    ) -> JoinCommit:
        """Atomically apply ``patch``, set ``inprogress`` and count the join.

        Must lock the candidate row, raise ``AlreadyCompleted`` if it became
        terminal meanwhile, and increment the job's applicants only when the
        row was still ``pending``.
        """
        ...


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, list, tuple, dict)) and len(value) == 0:
        return False
    return True


def merge_profile(updates: ProfileUpdates | None) -> dict[str, Any]:
    """Return the column patch for ``updates`` under the fallback rule.

    A field is included only when its incoming value is present; absent,
    ``None`` and empty values leave the stored column untouched.
    """
    if updates is None:
        return {}
    patch: dict[str, Any] = {}
    fields = updates.model_dump(mode="json", include=set(PROFILE_FIELDS))
    for field, value in fields.items():
        if _is_present(value):
            patch[field] = value
    return patch


def candidate_questions(
    job: JobPost,
    expose_answers: bool = True,
) -> list[CandidateQuestion]:
    """Project a job's questions to the fields a candidate may see."""
    return [
        CandidateQuestion(
            id=q.id,
            question=q.question,
            type=q.type,
            difficulty=q.difficulty,
            expected_duration=q.duration,
            category=q.category,
            suggested_answers=list(q.answer_points),
            options=list(q.options or []),
            right_answer=(q.right_answer or None) if expose_answers else None,
            is_required=True,
            order=q.id,
        )
        for q in sorted(job.questions, key=lambda q: q.id)
    ]


def job_preview(job: JobPost) -> JobPostPreview:
    return JobPostPreview(
        id=job.id,
        title=job.job_title,
        company=job.company,
        department=job.department,
        location=job.location,
        status=job.status,
        interview_start_date_time=job.interview_start_date_time,
        enable_video_recording=job.enable_video_recording,
        logo_url=job.logo_url,
    )


# ---------------------------------------------------------------------------
# Gate
# ---------------------------------------------------------------------------

class AccessGate:
    """Validates interview access requests against the current store state."""

    def __init__(
        self,
        tokens: TokenVerifier,
        jobs: JobPostStore,
        candidates: CandidateStore,
        clock: Clock = utcnow,
        expose_answers: bool = True,
    ) -> None:
        self.tokens = tokens
        self.jobs = jobs
        self.candidates = candidates
        self.clock = clock
        self.expose_answers = expose_answers

    def resolve_job(self, token: str, now: datetime | None = None) -> JobPost:
        """Verify ``token`` and load the job posting it grants access to."""
        claims = self.tokens.verify(token, now=now or self.clock())
        job = self.jobs.get_job_post(claims.job_post_id)
        if job is None:
            raise JobNotFound(claims.job_post_id)
        return job

    def preview(self, token: str) -> JobPostPreview:
        return job_preview(self.resolve_job(token))

    def request_join(
        self,
        token: str,
        email: str,
        profile_updates: ProfileUpdates | None = None,
    ) -> JoinResult:
        """Redeem ``token`` for ``email`` and open the interview session.

        Raises one of ``InvalidToken``, ``TokenExpired``, ``JobNotFound``,
        ``NotYetOpen``, ``AccessDenied``, ``AlreadyCompleted`` or
        ``StorageUnavailable``.  Nothing is written unless every check passes.
        """
        now = self.clock()
        job = self.resolve_job(token, now=now)

        start_at = job.interview_start_date_time
        if start_at is not None and now < start_at:
            raise NotYetOpen(start_at)

        candidate = self.candidates.find_candidate(job.id, email.strip().lower())
        if candidate is None:
            logger.info(
                "interview_join_denied",
                extra={"job_post_id": job.id, "email": mask_email(email)},
            )
            raise AccessDenied()

        if candidate.status.is_terminal:
            raise AlreadyCompleted()

        # Validates the move before touching the store
        candidate.status.transition_to(CandidateStatus.inprogress)

        patch = merge_profile(profile_updates)
        commit = self.candidates.commit_join(candidate.id, job.id, patch)

        logger.info(
            "interview_joined",
            extra={
                "job_post_id": job.id,
                "candidate_id": candidate.id,
                "first_join": commit.first_join,
                "applicants": commit.applicants,
            },
        )

        return JoinResult(
            job_post_id=job.id,
            job_title=job.job_title,
            applicants=commit.applicants,
            questions=candidate_questions(job, self.expose_answers),
            candidate_id=commit.candidate.id,
            candidate_name=commit.candidate.name,
        )
