"""Interview access endpoints.

POST /tokens   -- mint a share (2 day) or exam (30 day) link for a job.
POST /preview  -- resolve a token to the public job view.
POST /join     -- redeem token + email and start the interview.
POST /{candidate_id}/submit -- record answers and the final status.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from app.core.config import settings
from app.core.exceptions import (
    AccessDenied,
    AccessGateError,
    AlreadyCompleted,
    CandidateNotFound,
    InvalidStatusTransition,
    InvalidToken,
    JobNotFound,
    NotYetOpen,
    StorageUnavailable,
    TokenExpired,
)
from app.models.access import (
    JoinRequest,
    JoinResult,
    PreviewRequest,
    TokenRequest,
    TokenResponse,
)
from app.models.job_post import JobPostPreview
from app.models.submission import SubmissionRequest, SubmissionResult
from app.services.access_gate import AccessGate
from app.services.store import SupabaseInterviewStore
from app.services.submission import submit_interview
from app.services.tokens import get_token_service, issue_token, ttl_for, utcnow

logger = logging.getLogger(__name__)

router = APIRouter()

_STATUS_CODES: dict[type[AccessGateError], int] = {
    InvalidToken: 400,
    TokenExpired: 400,
    JobNotFound: 404,
    CandidateNotFound: 404,
    NotYetOpen: 403,
    AccessDenied: 403,
    AlreadyCompleted: 409,
    InvalidStatusTransition: 409,
    StorageUnavailable: 503,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def get_store() -> SupabaseInterviewStore:
    return SupabaseInterviewStore()


def get_access_gate(
    store: SupabaseInterviewStore = Depends(get_store),
) -> AccessGate:
    """Wire the gate to Supabase, the configured secret and the wall clock."""
    return AccessGate(
        tokens=get_token_service(),
        jobs=store,
        candidates=store,
        clock=utcnow,
        expose_answers=settings.EXPOSE_MCQ_ANSWERS,
    )


def _http_error(exc: AccessGateError) -> HTTPException:
    """Map a domain error onto the response the interview client expects."""
    detail: dict[str, Any] = {"error": type(exc).__name__, "message": exc.message}
    if isinstance(exc, NotYetOpen):
        detail["interview_start_date_time"] = exc.scheduled_at.isoformat()
    return HTTPException(status_code=_STATUS_CODES.get(type(exc), 500), detail=detail)


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

@router.post("/tokens", response_model=TokenResponse)
async def create_token(
    body: TokenRequest,
    store: SupabaseInterviewStore = Depends(get_store),
) -> TokenResponse:
    """Issue an access token for an existing job posting."""
    try:
        if store.get_job_post(body.job_post_id) is None:
            raise JobNotFound(body.job_post_id)
    except AccessGateError as exc:
        raise _http_error(exc) from exc

    issued = issue_token(body.job_post_id, ttl_for(body.kind))
    logger.info(
        "access_token_issued",
        extra={
            "job_post_id": body.job_post_id,
            "kind": body.kind.value,
            "expires_at": issued.expires_at.isoformat(),
        },
    )
    return TokenResponse(
        token=issued.token,
        expires_at=issued.expires_at,
        link=f"{settings.INTERVIEW_FRONTEND_URL.rstrip('/')}/?token={issued.token}",
    )


# ---------------------------------------------------------------------------
# Preview / Join
# ---------------------------------------------------------------------------

@router.post("/preview", response_model=JobPostPreview)
async def preview_job(
    body: PreviewRequest,
    gate: AccessGate = Depends(get_access_gate),
) -> JobPostPreview:
    """Return the job a token points at without checking any email."""
    try:
        return gate.preview(body.token)
    except AccessGateError as exc:
        raise _http_error(exc) from exc


@router.post("/join", response_model=JoinResult)
async def join_interview(
    body: JoinRequest,
    gate: AccessGate = Depends(get_access_gate),
) -> JoinResult:
    """Redeem a token for an allow-listed email and open the interview."""
    try:
        return gate.request_join(body.token, body.email, body.profile_updates())
    except AccessGateError as exc:
        raise _http_error(exc) from exc


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------

@router.post("/{candidate_id}/submit", response_model=SubmissionResult)
async def submit(
    candidate_id: int,
    body: SubmissionRequest,
    store: SupabaseInterviewStore = Depends(get_store),
) -> SubmissionResult:
    """Store the answers and move the candidate to its final status."""
    try:
        return submit_interview(candidate_id, body, store=store)
    except AccessGateError as exc:
        raise _http_error(exc) from exc
