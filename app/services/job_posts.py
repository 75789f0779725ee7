"""Job posting administration.

Jobs are written through the ``save_job_post`` PL/pgSQL function so the
job row, its questions and their answer points land in one transaction.
Reads use the same embedded select as the access gate.
"""

from __future__ import annotations

import logging
from typing import Any

from app.core.constants import (
    JOB_POST_WITH_QUESTIONS_SELECT,
    JOB_POSTS_TABLE,
    SAVE_JOB_POST_RPC,
)
from app.core.exceptions import JobNotFound, StorageUnavailable
from app.db.supabase import get_supabase
from app.models.job_post import JobPost, JobPostCreate, JobPostUpdate
from app.services.store import parse_job_post, rpc_row, storage_errors

logger = logging.getLogger(__name__)


def _save(
    job_post_id: int | None,
    job: dict[str, Any],
    questions: list[dict[str, Any]] | None,
) -> int:
    with storage_errors("save_job_post"):
        result = get_supabase().rpc(
            SAVE_JOB_POST_RPC,
            {"p_job_post_id": job_post_id, "p_job": job, "p_questions": questions},
        ).execute()

    row = rpc_row(result.data)
    outcome = row.get("outcome")
    if outcome == "not_found" and job_post_id is not None:
        raise JobNotFound(job_post_id)
    if outcome not in ("created", "updated"):
        logger.error(
            "save_job_post_unexpected_outcome",
            extra={"job_post_id": job_post_id, "outcome": outcome},
        )
        raise StorageUnavailable()
    return int(row["job_post_id"])


def get_job_post(job_post_id: int) -> JobPost:
    with storage_errors("get_job_post"):
        result = (
            get_supabase()
            .table(JOB_POSTS_TABLE)
            .select(JOB_POST_WITH_QUESTIONS_SELECT)
            .eq("id", job_post_id)
            .limit(1)
            .execute()
        )
    rows = result.data or []
    if not rows:
        raise JobNotFound(job_post_id)
    return parse_job_post(rows[0])


def list_job_posts() -> list[JobPost]:
    """All job postings with their questions, newest first."""
    with storage_errors("list_job_posts"):
        result = (
            get_supabase()
            .table(JOB_POSTS_TABLE)
            .select(JOB_POST_WITH_QUESTIONS_SELECT)
            .order("created_at", desc=True)
            .execute()
        )
    return [parse_job_post(row) for row in result.data or []]


def create_job_post(body: JobPostCreate) -> JobPost:
    job_post_id = _save(None, body.job_fields(), body.question_rows())
    logger.info(
        "job_post_created",
        extra={"job_post_id": job_post_id, "question_count": len(body.questions)},
    )
    return get_job_post(job_post_id)


def update_job_post(job_post_id: int, body: JobPostUpdate) -> JobPost:
    """Apply a partial update; a given question list replaces the old one."""
    _save(job_post_id, body.job_fields(), body.question_rows())
    logger.info(
        "job_post_updated",
        extra={
            "job_post_id": job_post_id,
            "questions_replaced": body.questions is not None,
        },
    )
    return get_job_post(job_post_id)


def delete_job_post(job_post_id: int) -> None:
    """Delete a job; its questions and roster go with it (``on delete cascade``)."""
    with storage_errors("delete_job_post"):
        result = (
            get_supabase()
            .table(JOB_POSTS_TABLE)
            .delete()
            .eq("id", job_post_id)
            .execute()
        )
    if not result.data:
        raise JobNotFound(job_post_id)
    logger.info("job_post_deleted", extra={"job_post_id": job_post_id})
