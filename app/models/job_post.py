"""Pydantic models for the ``job_posts`` and ``interview_questions`` tables.

Rows come back from PostgREST with questions embedded under
``interview_questions`` and their answer points under
``interview_answer_points``.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.enums import JobStatus


class InterviewQuestion(BaseModel):
    """A question attached to a job posting, as stored."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    question: str
    type: str | None = None
    difficulty: str | None = None
    duration: int | None = None
    category: str | None = None
    options: list[Any] = Field(default_factory=list)
    right_answer: str | None = None
    answer_points: list[str] = Field(default_factory=list)

    @field_validator("options", mode="before")
    @classmethod
    def _options_as_list(cls, value: Any) -> list[Any]:
        # jsonb column; anything but an array reads as no options
        return value if isinstance(value, list) else []


class CandidateQuestion(BaseModel):
    """Question as handed to a candidate who joined the interview."""
    id: int
    question: str
    type: str | None = None
    difficulty: str | None = None
    expected_duration: int | None = None
    category: str | None = None
    suggested_answers: list[str] = []
    options: list[Any] = []
    right_answer: str | None = None
    is_required: bool = True
    order: int


class JobPost(BaseModel):
    """Job posting record with its interview questions."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    job_title: str
    company: str | None = None
    department: str | None = None
    location: list[str] = []
    job_type: str | None = None
    experience_level: str | None = None
    job_description: str | None = None
    status: JobStatus = JobStatus.draft
    interview_start_date_time: datetime | None = None
    applicants: int = 0
    interviews: int = 0
    active_join_user_count: int = 0
    enable_video_recording: bool = False
    logo_url: str | None = None
    created_at: datetime | None = None
    questions: list[InterviewQuestion] = []

    @field_validator("interview_start_date_time")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        # ``timestamp without time zone`` columns come back naive
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class JobPostPreview(BaseModel):
    """Public view of a job posting shown before the candidate joins."""
    id: int
    title: str
    company: str | None = None
    department: str | None = None
    location: list[str] = []
    status: JobStatus
    interview_start_date_time: datetime | None = None
    enable_video_recording: bool = False
    logo_url: str | None = None


# ---------------------------------------------------------------------------
# Write models
# ---------------------------------------------------------------------------

class QuestionCreate(BaseModel):
    """Question as submitted by an administrator.

    Options are trimmed and blanks dropped.  ``right_answer`` is only
    accepted when it is one of the remaining options.
    """
    question: str = Field(min_length=1)
    type: str | None = None
    difficulty: str | None = None
    expected_duration: int | None = None
    category: str | None = None
    suggested_answers: list[str] = []
    options: list[str] = []
    right_answer: str | None = None

    @field_validator("options", mode="before")
    @classmethod
    def _clean_options(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(o).strip() for o in value if o is not None and str(o).strip()]

    @field_validator("right_answer", mode="before")
    @classmethod
    def _blank_right_answer(cls, value: Any) -> str | None:
        if value is None or str(value).strip() == "":
            return None
        return str(value).strip()

    @model_validator(mode="after")
    def _right_answer_in_options(self) -> "QuestionCreate":
        if self.right_answer is None:
            return self
        label = self.question[:50]
        if not self.options:
            raise ValueError(
                f'Question "{label}": right_answer can only be set when options are provided'
            )
        if self.right_answer not in self.options:
            raise ValueError(
                f'Question "{label}": right_answer must be one of the option values'
            )
        return self

    def to_row(self) -> dict[str, Any]:
        """Payload for ``save_job_post``: one question with its answer points."""
        return {
            "question": self.question,
            "type": self.type,
            "difficulty": self.difficulty,
            "duration": self.expected_duration,
            "category": self.category,
            "options": self.options,
            "right_answer": self.right_answer,
            "answer_points": [a for a in self.suggested_answers if a.strip()],
        }


class JobPostUpdate(BaseModel):
    """Partial update; omitted fields keep their stored value.

    When ``questions`` is given it replaces the job's whole question set.
    """
    title: str | None = Field(default=None, min_length=1)
    company: str | None = None
    department: str | None = None
    location: list[str] | None = None
    job_type: str | None = None
    experience_level: str | None = None
    description: str | None = None
    status: JobStatus | None = None
    interview_start_date_time: datetime | None = None
    enable_video_recording: bool | None = None
    logo_url: str | None = None
    questions: list[QuestionCreate] | None = None

    @field_validator("location", mode="before")
    @classmethod
    def _location_as_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value] if value else []
        return value

    def job_fields(self) -> dict[str, Any]:
        """Column values for ``job_posts``, excluding fields left unset."""
        data = self.model_dump(mode="json", exclude={"questions"}, exclude_unset=True)
        if "title" in data:
            data["job_title"] = data.pop("title")
        if "description" in data:
            data["job_description"] = data.pop("description")
        return data

    def question_rows(self) -> list[dict[str, Any]] | None:
        if self.questions is None:
            return None
        return [q.to_row() for q in self.questions]


class JobPostCreate(JobPostUpdate):
    """Body for POST /api/v1/jobs."""
    title: str = Field(min_length=1)
    company: str = Field(min_length=1)
    department: str = Field(min_length=1)
    location: list[str] = Field(min_length=1)
    status: JobStatus = JobStatus.draft
    enable_video_recording: bool = False
    questions: list[QuestionCreate] = []

    def job_fields(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", exclude={"questions"})
        data["job_title"] = data.pop("title")
        data["job_description"] = data.pop("description")
        return data
