"""Models for recording a finished interview."""

from typing import Any, Literal

from pydantic import BaseModel

from app.models.enums import CandidateStatus


class InterviewAnswerCreate(BaseModel):
    """One answered question (``student_interview_answers`` row)."""
    question_id: int
    answer: str | None = None
    score: int | None = None
    response_time: int | None = None
    end_time: int | None = None


class SubmissionRequest(BaseModel):
    """Body for POST /api/v1/interviews/{candidate_id}/submit."""
    status: Literal["under_review", "completed"] = "under_review"
    answers: list[InterviewAnswerCreate] = []
    overall_score: int | None = None
    total_score: int | None = None
    grade: str | None = None
    attempted_questions: int | None = None
    average_response_time: int | None = None
    interview_video_link: str | None = None
    scores: dict[str, Any] | None = None


class SubmissionResult(BaseModel):
    candidate_id: int
    status: CandidateStatus
    interviews: int
