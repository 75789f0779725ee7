"""Interview submission: move a candidate out of ``inprogress``."""

from __future__ import annotations

import logging

from app.core.exceptions import CandidateNotFound
from app.models.enums import CandidateStatus
from app.models.submission import SubmissionRequest, SubmissionResult
from app.services.store import SupabaseInterviewStore

logger = logging.getLogger(__name__)


def submit_interview(
    candidate_id: int,
    submission: SubmissionRequest,
    store: SupabaseInterviewStore | None = None,
) -> SubmissionResult:
    """Record the answers and final status for ``candidate_id``.

    The transition is validated here against the status table and again by
    the ``submit_interview`` function under a row lock, which also bumps
    the job's ``interviews`` counter the first time a candidate submits.
    """
    store = store or SupabaseInterviewStore()

    candidate = store.get_candidate(candidate_id)
    if candidate is None:
        raise CandidateNotFound()

    candidate.status.transition_to(CandidateStatus(submission.status))

    result = store.submit_interview(candidate_id, submission)
    logger.info(
        "interview_submitted",
        extra={
            "candidate_id": candidate_id,
            "job_post_id": candidate.job_post_id,
            "status": result.status.value,
            "answers": len(submission.answers),
        },
    )
    return result
