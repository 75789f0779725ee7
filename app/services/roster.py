"""Candidate roster management for a job posting.

Administrators upload the allow-list of candidates per job; this is the
only place candidate identity is created.  Emails are lowercased on the
way in, so the ``(job_post_id, email)`` lookup used by the access gate is
case-insensitive.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from app.core.constants import (
    ANSWERS_TABLE,
    CANDIDATE_DETAIL_SELECT,
    CANDIDATES_TABLE,
    JOB_POSTS_TABLE,
    ROSTER_COLUMNS,
)
from app.core.exceptions import CandidateNotFound
from app.db.supabase import get_supabase
from app.models.candidate import (
    AnsweredQuestion,
    CandidateCreate,
    CandidateDetail,
    RosterCreateResult,
    RosterEntry,
)
from app.models.enums import CandidateStatus
from app.services.store import parse_job_post, storage_errors

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _to_entry(row: dict[str, Any]) -> RosterEntry:
    return RosterEntry(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        phone_number=row.get("mobile"),
        job_post_id=row["job_post_id"],
        status=row.get("status", CandidateStatus.pending),
        created_at=row.get("created_at"),
    )


def _insert_rows(job_post_id: int, candidates: list[CandidateCreate]) -> list[RosterEntry]:
    """Insert pending candidates; rows whose email is already taken are skipped.

    ``ignore_duplicates`` makes the insert ``ON CONFLICT DO NOTHING`` on the
    ``(job_post_id, email)`` key, so only the rows actually written come back.
    """
    applied = datetime.now(timezone.utc).isoformat()
    rows = [
        {
            "name": c.name,
            "email": c.email,
            "mobile": c.phone_number,
            "job_post_id": job_post_id,
            "status": CandidateStatus.pending.value,
            "applied_date": applied,
        }
        for c in candidates
    ]
    with storage_errors("insert_candidates"):
        result = (
            get_supabase()
            .table(CANDIDATES_TABLE)
            .upsert(rows, on_conflict="job_post_id,email", ignore_duplicates=True)
            .execute()
        )
    return [_to_entry(row) for row in result.data or []]


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def create_candidates(
    job_post_id: int,
    candidates: list[CandidateCreate],
) -> RosterCreateResult:
    """Add candidates to a job, skipping emails already on its roster.

    Duplicates inside the batch are also collapsed to the first occurrence.
    """
    client = get_supabase()
    emails = [c.email for c in candidates]

    with storage_errors("find_existing_candidates"):
        existing = (
            client.table(CANDIDATES_TABLE)
            .select("email")
            .eq("job_post_id", job_post_id)
            .in_("email", emails)
            .execute()
        )
    taken: set[str] = {row["email"].lower() for row in existing.data or []}

    skipped: list[str] = []
    fresh: list[CandidateCreate] = []
    for candidate in candidates:
        if candidate.email in taken:
            skipped.append(candidate.email)
            continue
        taken.add(candidate.email)
        fresh.append(candidate)

    created = _insert_rows(job_post_id, fresh) if fresh else []

    # lost a race with a concurrent upload for the same job
    written = {entry.email for entry in created}
    skipped.extend(c.email for c in fresh if c.email not in written)

    logger.info(
        "roster_candidates_created",
        extra={
            "job_post_id": job_post_id,
            "created_count": len(created),
            "skipped_count": len(skipped),
        },
    )
    return RosterCreateResult(created=created, skipped_duplicates=skipped)


def list_candidates(job_post_id: int) -> list[RosterEntry]:
    """Return the roster for a job, newest first."""
    with storage_errors("list_candidates"):
        result = (
            get_supabase()
            .table(CANDIDATES_TABLE)
            .select(ROSTER_COLUMNS)
            .eq("job_post_id", job_post_id)
            .order("created_at", desc=True)
            .execute()
        )
    return [_to_entry(row) for row in result.data or []]


def count_candidates(job_post_id: int) -> int:
    with storage_errors("count_candidates"):
        result = (
            get_supabase()
            .table(CANDIDATES_TABLE)
            .select("id", count="exact")
            .eq("job_post_id", job_post_id)
            .execute()
        )
    if result.count is not None:
        return int(result.count)
    return len(result.data or [])


def delete_candidates_for_job(job_post_id: int) -> int:
    """Remove every candidate of a job; returns how many were deleted."""
    with storage_errors("delete_candidates_for_job"):
        result = (
            get_supabase()
            .table(CANDIDATES_TABLE)
            .delete()
            .eq("job_post_id", job_post_id)
            .execute()
        )
    deleted = len(result.data or [])
    logger.info(
        "roster_cleared",
        extra={"job_post_id": job_post_id, "deleted_count": deleted},
    )
    return deleted


def delete_candidate(candidate_id: int) -> None:
    with storage_errors("delete_candidate"):
        result = (
            get_supabase()
            .table(CANDIDATES_TABLE)
            .delete()
            .eq("id", candidate_id)
            .execute()
        )
    if not result.data:
        raise CandidateNotFound()


def replace_candidates(
    job_post_id: int,
    candidates: list[CandidateCreate],
) -> list[RosterEntry]:
    """Replace the whole roster of a job with ``candidates`` (all pending)."""
    delete_candidates_for_job(job_post_id)
    if not candidates:
        return []
    unique: dict[str, CandidateCreate] = {}
    for candidate in candidates:
        unique.setdefault(candidate.email, candidate)
    return _insert_rows(job_post_id, list(unique.values()))


def get_candidate_detail(candidate_id: int) -> CandidateDetail:
    """Return a candidate with its job and answered questions."""
    with storage_errors("get_candidate_detail"):
        result = (
            get_supabase()
            .table(CANDIDATES_TABLE)
            .select(CANDIDATE_DETAIL_SELECT)
            .eq("id", candidate_id)
            .limit(1)
            .execute()
        )
    rows = result.data or []
    if not rows:
        raise CandidateNotFound()

    row = dict(rows[0])
    job_row = row.pop(JOB_POSTS_TABLE, None)
    answers = [
        AnsweredQuestion(
            **{k: v for k, v in a.items() if k != "interview_questions"},
            question=a.get("interview_questions"),
        )
        for a in row.pop(ANSWERS_TABLE, None) or []
    ]
    answers.sort(key=lambda a: a.id)
    return CandidateDetail(
        **row,
        job_post=parse_job_post(job_row) if job_row else None,
        answers=answers,
    )
