"""Shared test fixtures.

Provides a ``test_client`` for FastAPI, mock Supabase clients, and an
in-memory interview store that mimics the locking RPC functions.
"""

import os

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-key")
os.environ.setdefault("LINK_TOKEN_SECRET", "test-link-secret")

import threading
from collections.abc import Generator
from datetime import datetime, timezone
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.core.exceptions import AlreadyCompleted
from app.models.access import JoinCommit
from app.models.candidate import Candidate
from app.models.enums import CandidateStatus
from app.models.job_post import InterviewQuestion, JobPost
from app.services.tokens import TokenService

SECRET = "test-link-secret"
NOW = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock whose time the test moves by hand."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class InMemoryInterviewStore:
    """Job and candidate store with the same commit semantics as the RPC."""

    def __init__(self) -> None:
        self.jobs: dict[int, JobPost] = {}
        self.candidates: dict[int, Candidate] = {}
        self.commits = 0
        self._lock = threading.Lock()

    def add_job(self, job: JobPost) -> JobPost:
        self.jobs[job.id] = job
        return job

    def add_candidate(self, candidate: Candidate) -> Candidate:
        self.candidates[candidate.id] = candidate
        return candidate

    def get_job_post(self, job_post_id: int) -> JobPost | None:
        return self.jobs.get(job_post_id)

    def find_candidate(self, job_post_id: int, email: str) -> Candidate | None:
        for candidate in self.candidates.values():
            if candidate.job_post_id == job_post_id and candidate.email == email:
                return candidate
        return None

    def commit_join(
        self,
        candidate_id: int,
        job_post_id: int,
        patch: dict[str, Any],
    ) -> JoinCommit:
        with self._lock:
            self.commits += 1
            current = self.candidates[candidate_id]
            if current.status.is_terminal:
                raise AlreadyCompleted()
            first_join = current.status is CandidateStatus.pending
            updated = Candidate.model_validate(
                {**current.model_dump(), **patch, "status": CandidateStatus.inprogress}
            )
            self.candidates[candidate_id] = updated
            job = self.jobs[job_post_id]
            if first_join:
                job = job.model_copy(update={"applicants": job.applicants + 1})
                self.jobs[job_post_id] = job
            return JoinCommit(
                candidate=updated, applicants=job.applicants, first_join=first_join
            )


def make_job(job_id: int = 42, **overrides: Any) -> JobPost:
    fields: dict[str, Any] = {
        "id": job_id,
        "job_title": "Backend Engineer",
        "company": "Acme",
        "status": "active",
        "applicants": 0,
        "questions": [
            InterviewQuestion(
                id=2,
                question="Which HTTP verb is idempotent?",
                type="mcq",
                difficulty="easy",
                duration=60,
                category="technical",
                options=["POST", "PUT"],
                right_answer="PUT",
            ),
            InterviewQuestion(
                id=1,
                question="Tell us about yourself",
                type="text",
                duration=120,
                answer_points=["background", "motivation"],
            ),
        ],
    }
    fields.update(overrides)
    return JobPost(**fields)


def make_candidate(
    candidate_id: int = 7,
    job_post_id: int = 42,
    email: str = "a@b.com",
    **overrides: Any,
) -> Candidate:
    fields: dict[str, Any] = {
        "id": candidate_id,
        "job_post_id": job_post_id,
        "name": "Jane",
        "email": email,
        "mobile": "555-0100",
        "status": "pending",
    }
    fields.update(overrides)
    return Candidate(**fields)


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def token_service() -> TokenService:
    return TokenService(SECRET)


@pytest.fixture()
def store() -> InMemoryInterviewStore:
    store = InMemoryInterviewStore()
    store.add_job(make_job())
    store.add_candidate(make_candidate())
    return store


def _chainable_table_mock() -> MagicMock:
    """Return a mock that supports fluent chaining."""
    m = MagicMock()
    for method in (
        "select", "insert", "upsert", "update", "delete", "eq", "limit",
        "in_", "gt", "lt", "is_", "order",
    ):
        getattr(m, method).return_value = m
    m.count = None
    return m


@pytest.fixture()
def table_mock() -> MagicMock:
    return _chainable_table_mock()


@pytest.fixture()
def mock_supabase_module() -> Generator[MagicMock, None, None]:
    """Patch the Supabase client at module level in the health router."""
    mock_client = MagicMock()
    mock_client.table.return_value = _chainable_table_mock()
    with patch("app.routers.health.get_supabase", return_value=mock_client):
        yield mock_client


@pytest.fixture()
def mock_supabase_disconnected() -> Generator[MagicMock, None, None]:
    """Patch ``get_supabase`` to simulate a disconnected database."""
    with patch(
        "app.routers.health.get_supabase",
        side_effect=Exception("Connection refused"),
    ):
        yield MagicMock()


@pytest.fixture()
def test_client() -> Generator[TestClient, None, None]:
    """Provide a FastAPI TestClient."""
    from app.main import app

    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
