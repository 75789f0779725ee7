"""Job posting endpoints (administrator side).

A job must exist here before access tokens can be issued for it.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from app.core.exceptions import JobNotFound, StorageUnavailable
from app.models.job_post import JobPost, JobPostCreate, JobPostUpdate
from app.services.job_posts import (
    create_job_post,
    delete_job_post,
    get_job_post,
    list_job_posts,
    update_job_post,
)
from app.services.roster import list_candidates

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found(exc: JobNotFound) -> HTTPException:
    return HTTPException(status_code=404, detail=exc.message)


def _unavailable(exc: StorageUnavailable) -> HTTPException:
    return HTTPException(status_code=503, detail=exc.message)


@router.post("", response_model=JobPost, status_code=201)
async def add_job_post(body: JobPostCreate) -> JobPost:
    """Create a job with its questions.

    A question's ``right_answer`` must be one of its options (422 otherwise).
    """
    try:
        return create_job_post(body)
    except StorageUnavailable as exc:
        raise _unavailable(exc) from exc


@router.get("", response_model=list[JobPost])
async def get_job_posts() -> list[JobPost]:
    try:
        return list_job_posts()
    except StorageUnavailable as exc:
        raise _unavailable(exc) from exc


@router.get("/{job_post_id}")
async def get_job_post_with_roster(job_post_id: int) -> dict[str, Any]:
    """Return the job together with its candidate roster."""
    try:
        post = get_job_post(job_post_id)
        candidates = list_candidates(job_post_id)
    except JobNotFound as exc:
        raise _not_found(exc) from exc
    except StorageUnavailable as exc:
        raise _unavailable(exc) from exc
    return {
        "post": post.model_dump(mode="json"),
        "candidates": [c.model_dump(mode="json") for c in candidates],
    }


@router.put("/{job_post_id}", response_model=JobPost)
async def put_job_post(job_post_id: int, body: JobPostUpdate) -> JobPost:
    try:
        return update_job_post(job_post_id, body)
    except JobNotFound as exc:
        raise _not_found(exc) from exc
    except StorageUnavailable as exc:
        raise _unavailable(exc) from exc


@router.delete("/{job_post_id}")
async def remove_job_post(job_post_id: int) -> dict[str, str]:
    try:
        delete_job_post(job_post_id)
    except JobNotFound as exc:
        raise _not_found(exc) from exc
    except StorageUnavailable as exc:
        raise _unavailable(exc) from exc
    return {"message": "Job post deleted"}
