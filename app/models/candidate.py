"""Pydantic models for the ``students_with_job_post`` table.

A candidate row is the per-job allow-list entry plus the interview progress
state.  Emails are always stored lowercased.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.enums import CandidateStatus
from app.models.job_post import InterviewQuestion, JobPost


class Education(BaseModel):
    """One entry of a candidate's education history."""
    type: str | None = None  # tenth | plusTwo | degree
    school_name: str | None = None
    college_name: str | None = None
    stream: str | None = None
    percentage: str | None = None
    year_of_passing: str | None = None


class CandidateCreate(BaseModel):
    """Roster entry supplied by an administrator."""
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone_number: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: str) -> str:
        return value.strip().lower()


class ProfileUpdates(BaseModel):
    """Optional profile fields a candidate may fill in when joining."""
    name: str | None = None
    resume_url: str | None = None
    mobile: str | None = None
    dob: date | None = None
    highest_qualification: str | None = None
    educations: list[Education] | None = None
    location: str | None = None
    skills: list[str] | None = None
    region: str | None = None
    residence_location: str | None = None


class Candidate(BaseModel):
    """Full candidate record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    job_post_id: int
    name: str
    email: str
    mobile: str | None = None
    dob: date | None = None
    highest_qualification: str | None = None
    educations: list[dict[str, Any]] | None = None
    location: str | None = None
    skills: list[str] | None = None
    resume_url: str | None = None
    region: str | None = None
    residence_location: str | None = None
    status: CandidateStatus = CandidateStatus.pending
    applied_date: datetime | None = None
    overall_score: int | None = None
    total_score: int | None = None
    grade: str | None = None
    attempted_questions: int | None = None
    average_response_time: int | None = None
    interview_video_link: str | None = None
    scores: dict[str, Any] | None = None
    created_at: datetime | None = None


class RosterPayload(BaseModel):
    """Body for the roster create / replace endpoints."""
    candidates: list[CandidateCreate]


class RosterEntry(BaseModel):
    """Candidate as listed on the admin roster."""
    id: int
    name: str
    email: str
    phone_number: str | None = None
    job_post_id: int
    status: CandidateStatus
    created_at: datetime | None = None


class RosterCreateResult(BaseModel):
    created: list[RosterEntry] = []
    skipped_duplicates: list[str] = []


class AnsweredQuestion(BaseModel):
    """A stored answer with the question it responds to."""
    id: int
    question_id: int | None = None
    answer: str | None = None
    score: int | None = None
    response_time: int | None = None
    end_time: int | None = None
    created_at: datetime | None = None
    question: InterviewQuestion | None = None


class CandidateDetail(Candidate):
    """Candidate with its job posting and submitted answers."""
    job_post: JobPost | None = None
    answers: list[AnsweredQuestion] = []
