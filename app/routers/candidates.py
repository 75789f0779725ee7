"""Candidate roster endpoints (administrator side).

The roster is the allow-list the access gate checks emails against.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from app.core.exceptions import CandidateNotFound, StorageUnavailable
from app.models.candidate import CandidateDetail, RosterEntry, RosterPayload
from app.services.roster import (
    count_candidates,
    create_candidates,
    delete_candidate,
    delete_candidates_for_job,
    get_candidate_detail,
    list_candidates,
    replace_candidates,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _unavailable(exc: StorageUnavailable) -> HTTPException:
    return HTTPException(status_code=503, detail=exc.message)


@router.post("/jobs/{job_post_id}", status_code=201)
async def add_candidates(job_post_id: int, body: RosterPayload) -> dict[str, Any]:
    """Add candidates to a job's roster, skipping duplicate emails.

    Returns 409 when every submitted email is already on the roster.
    """
    if not body.candidates:
        raise HTTPException(status_code=400, detail="candidates must not be empty")

    try:
        result = create_candidates(job_post_id, body.candidates)
    except StorageUnavailable as exc:
        raise _unavailable(exc) from exc

    if not result.created:
        raise HTTPException(
            status_code=409,
            detail={
                "message": "All candidates already exist for this job post",
                "skipped_duplicates": result.skipped_duplicates,
            },
        )

    return {
        "count": len(result.created),
        "candidates": [c.model_dump(mode="json") for c in result.created],
        "skipped_duplicates": result.skipped_duplicates,
    }


@router.get("/jobs/{job_post_id}", response_model=list[RosterEntry])
async def get_roster(job_post_id: int) -> list[RosterEntry]:
    try:
        return list_candidates(job_post_id)
    except StorageUnavailable as exc:
        raise _unavailable(exc) from exc


@router.get("/jobs/{job_post_id}/count")
async def get_roster_count(job_post_id: int) -> dict[str, int]:
    try:
        count = count_candidates(job_post_id)
    except StorageUnavailable as exc:
        raise _unavailable(exc) from exc
    return {"job_post_id": job_post_id, "count": count}


@router.put("/jobs/{job_post_id}", response_model=list[RosterEntry])
async def put_roster(job_post_id: int, body: RosterPayload) -> list[RosterEntry]:
    """Replace the roster; every candidate restarts as ``pending``."""
    try:
        return replace_candidates(job_post_id, body.candidates)
    except StorageUnavailable as exc:
        raise _unavailable(exc) from exc


@router.delete("/jobs/{job_post_id}")
async def clear_roster(job_post_id: int) -> dict[str, int]:
    try:
        deleted = delete_candidates_for_job(job_post_id)
    except StorageUnavailable as exc:
        raise _unavailable(exc) from exc
    return {"deleted_count": deleted}


@router.delete("/{candidate_id}", status_code=204)
async def remove_candidate(candidate_id: int) -> None:
    try:
        delete_candidate(candidate_id)
    except CandidateNotFound as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except StorageUnavailable as exc:
        raise _unavailable(exc) from exc


@router.get("/{candidate_id}", response_model=CandidateDetail)
async def get_candidate(candidate_id: int) -> CandidateDetail:
    """Return a candidate with its job and answers (each with its question)."""
    try:
        return get_candidate_detail(candidate_id)
    except CandidateNotFound as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except StorageUnavailable as exc:
        raise _unavailable(exc) from exc
