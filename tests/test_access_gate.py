"""Unit tests for the interview access gate.

Runs the gate against the in-memory store from ``conftest`` so every check
and the commit semantics are exercised without Supabase.
"""

from __future__ import annotations

import threading
from datetime import date, timedelta

import pytest

from app.core.exceptions import (
    AccessDenied,
    AlreadyCompleted,
    InvalidToken,
    JobNotFound,
    NotYetOpen,
    TokenExpired,
)
from app.models.access import JoinRequest
from app.models.candidate import Education, ProfileUpdates
from app.models.enums import CandidateStatus
from app.services.access_gate import AccessGate, candidate_questions, merge_profile
from app.services.tokens import TokenService

from conftest import NOW, FrozenClock, InMemoryInterviewStore, make_candidate, make_job


def _gate(
    store: InMemoryInterviewStore,
    token_service: TokenService,
    clock: FrozenClock,
    expose_answers: bool = True,
) -> AccessGate:
    return AccessGate(token_service, store, store, clock=clock, expose_answers=expose_answers)


def _token(token_service: TokenService, job_id: int = 42, days: int = 30) -> str:
    return token_service.sign(job_id, timedelta(days=days), now=NOW).token


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestJoin:

    def test_end_to_end(self, store, token_service, clock) -> None:
        store.jobs[42] = make_job(interview_start_date_time=NOW - timedelta(hours=1))
        gate = _gate(store, token_service, clock)

        result = gate.request_join(
            _token(token_service), "A@B.com", ProfileUpdates(name="Alice")
        )

        assert result.job_post_id == 42
        assert result.job_title == "Backend Engineer"
        assert result.applicants == 1
        assert result.candidate_id == 7
        assert result.candidate_name == "Alice"
        assert [q.id for q in result.questions] == [1, 2]
        assert store.candidates[7].status is CandidateStatus.inprogress
        assert store.jobs[42].applicants == 1

    def test_rejoin_while_in_progress_is_idempotent(self, store, token_service, clock) -> None:
        gate = _gate(store, token_service, clock)
        token = _token(token_service)

        first = gate.request_join(token, "a@b.com")
        second = gate.request_join(token, "a@b.com")

        assert first.applicants == 1
        assert second.applicants == 1
        assert store.candidates[7].status is CandidateStatus.inprogress

    def test_rejoin_rejected_after_submission(self, store, token_service, clock) -> None:
        gate = _gate(store, token_service, clock)
        token = _token(token_service)
        gate.request_join(token, "a@b.com")

        for status in (CandidateStatus.under_review, CandidateStatus.completed):
            store.candidates[7] = store.candidates[7].model_copy(update={"status": status})
            with pytest.raises(AlreadyCompleted):
                gate.request_join(token, "a@b.com")

    def test_email_match_is_case_insensitive(self, token_service, clock) -> None:
        store = InMemoryInterviewStore()
        store.add_job(make_job())
        # Roster stores emails lowercased
        store.add_candidate(make_candidate(email="jane@x.com"))

        result = _gate(store, token_service, clock).request_join(
            _token(token_service), "Jane@X.com"
        )
        assert result.candidate_id == 7

    def test_concurrent_joins_count_once(self, store, token_service, clock) -> None:
        gate = _gate(store, token_service, clock)
        token = _token(token_service)
        errors: list[Exception] = []
        barrier = threading.Barrier(8)

        def join() -> None:
            barrier.wait()
            try:
                gate.request_join(token, "a@b.com")
            except Exception as exc:  # pragma: no cover - surfaced below
                errors.append(exc)

        threads = [threading.Thread(target=join) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert store.commits == 8
        assert store.jobs[42].applicants == 1


# ---------------------------------------------------------------------------
# Failure modes, in check order
# ---------------------------------------------------------------------------


class TestRejections:

    def test_invalid_token(self, store, token_service, clock) -> None:
        with pytest.raises(InvalidToken):
            _gate(store, token_service, clock).request_join("garbage", "a@b.com")
        assert store.commits == 0

    def test_expired_token_wins_over_everything(self, store, token_service, clock) -> None:
        token = _token(token_service, days=2)
        clock.now = NOW + timedelta(days=3)

        with pytest.raises(TokenExpired):
            _gate(store, token_service, clock).request_join(token, "a@b.com")
        assert store.candidates[7].status is CandidateStatus.pending

    def test_job_not_found(self, store, token_service, clock) -> None:
        with pytest.raises(JobNotFound) as info:
            _gate(store, token_service, clock).request_join(
                _token(token_service, job_id=99), "a@b.com"
            )
        assert info.value.job_post_id == 99

    def test_not_yet_open(self, store, token_service, clock) -> None:
        start = NOW + timedelta(minutes=30)
        store.jobs[42] = make_job(interview_start_date_time=start)
        gate = _gate(store, token_service, clock)

        with pytest.raises(NotYetOpen) as info:
            gate.request_join(_token(token_service), "a@b.com")
        assert info.value.scheduled_at == start
        assert store.commits == 0

    def test_opens_exactly_at_start_time(self, store, token_service, clock) -> None:
        start = NOW + timedelta(minutes=30)
        store.jobs[42] = make_job(interview_start_date_time=start)
        clock.now = start

        result = _gate(store, token_service, clock).request_join(
            _token(token_service), "a@b.com"
        )
        assert result.applicants == 1

    def test_schedule_checked_before_allow_list(self, store, token_service, clock) -> None:
        store.jobs[42] = make_job(interview_start_date_time=NOW + timedelta(days=1))

        with pytest.raises(NotYetOpen):
            _gate(store, token_service, clock).request_join(
                _token(token_service), "stranger@b.com"
            )

    def test_unknown_email_denied(self, store, token_service, clock) -> None:
        with pytest.raises(AccessDenied):
            _gate(store, token_service, clock).request_join(
                _token(token_service), "stranger@b.com"
            )

    def test_email_on_other_job_denied(self, store, token_service, clock) -> None:
        store.add_job(make_job(job_id=43))

        with pytest.raises(AccessDenied):
            _gate(store, token_service, clock).request_join(
                _token(token_service, job_id=43), "a@b.com"
            )

    def test_completed_candidate_not_mutated(self, store, token_service, clock) -> None:
        store.candidates[7] = make_candidate(status="completed")

        with pytest.raises(AlreadyCompleted):
            _gate(store, token_service, clock).request_join(
                _token(token_service), "a@b.com", ProfileUpdates(name="Mallory")
            )
        assert store.candidates[7].name == "Jane"
        assert store.commits == 0
        assert store.jobs[42].applicants == 0


# ---------------------------------------------------------------------------
# Profile merge
# ---------------------------------------------------------------------------


class TestProfileMerge:

    def test_absent_fields_keep_stored_values(self, store, token_service, clock) -> None:
        _gate(store, token_service, clock).request_join(
            _token(token_service), "a@b.com", ProfileUpdates(region="north")
        )
        candidate = store.candidates[7]
        assert candidate.name == "Jane"
        assert candidate.mobile == "555-0100"
        assert candidate.region == "north"

    def test_present_fields_overwrite(self, store, token_service, clock) -> None:
        _gate(store, token_service, clock).request_join(
            _token(token_service), "a@b.com", ProfileUpdates(name="Jane Doe")
        )
        assert store.candidates[7].name == "Jane Doe"

    def test_empty_values_are_not_present(self) -> None:
        patch = merge_profile(
            ProfileUpdates(name="", skills=[], educations=[], mobile=None, location="Pune")
        )
        assert patch == {"location": "Pune"}

    def test_patch_is_json_ready(self) -> None:
        patch = merge_profile(
            ProfileUpdates(
                dob=date(2000, 1, 31),
                skills=["python"],
                educations=[Education(type="degree", college_name="IIT")],
            )
        )
        assert patch["dob"] == "2000-01-31"
        assert patch["skills"] == ["python"]
        assert patch["educations"][0]["college_name"] == "IIT"

    def test_no_updates(self) -> None:
        assert merge_profile(None) == {}

    def test_join_credentials_never_reach_the_patch(self) -> None:
        request = JoinRequest(token="t", email="a@b.com", name="Alice")

        assert merge_profile(request) == {"name": "Alice"}


# ---------------------------------------------------------------------------
# Question projection
# ---------------------------------------------------------------------------


class TestQuestions:

    def test_projection_fields(self) -> None:
        questions = candidate_questions(make_job())

        text_q, mcq = questions
        assert text_q.suggested_answers == ["background", "motivation"]
        assert text_q.expected_duration == 120
        assert text_q.options == []
        assert mcq.options == ["POST", "PUT"]
        assert mcq.right_answer == "PUT"
        assert mcq.order == 2

    def test_answers_can_be_withheld(self) -> None:
        questions = candidate_questions(make_job(), expose_answers=False)
        assert all(q.right_answer is None for q in questions)

    def test_preview_does_not_need_email(self, store, token_service, clock) -> None:
        preview = _gate(store, token_service, clock).preview(_token(token_service))
        assert preview.id == 42
        assert preview.title == "Backend Engineer"
