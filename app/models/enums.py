"""Enum types mirroring PostgreSQL custom enums."""

from __future__ import annotations

from enum import Enum

from app.core.exceptions import InvalidStatusTransition


class JobStatus(str, Enum):
    """Publication status of a job posting."""
    draft = "draft"
    active = "active"
    paused = "paused"
    closed = "closed"


class CandidateStatus(str, Enum):
    """Interview progress of a candidate on a job posting."""
    pending = "pending"
    inprogress = "inprogress"
    under_review = "under_review"
    completed = "completed"

    @property
    def is_terminal(self) -> bool:
        """True once the interview was submitted; joining is then refused."""
        return self in (CandidateStatus.under_review, CandidateStatus.completed)

    def can_transition_to(self, target: CandidateStatus) -> bool:
        return target in STATUS_TRANSITIONS[self]

    def transition_to(self, target: CandidateStatus) -> CandidateStatus:
        """Return ``target`` if the move is legal, else raise."""
        if not self.can_transition_to(target):
            raise InvalidStatusTransition(self.value, target.value)
        return target


# Rejoining while in progress is allowed, hence the self-loop.
STATUS_TRANSITIONS: dict[CandidateStatus, frozenset[CandidateStatus]] = {
    CandidateStatus.pending: frozenset({CandidateStatus.inprogress}),
    CandidateStatus.inprogress: frozenset({
        CandidateStatus.inprogress,
        CandidateStatus.under_review,
        CandidateStatus.completed,
    }),
    CandidateStatus.under_review: frozenset({CandidateStatus.completed}),
    CandidateStatus.completed: frozenset(),
}


class TokenKind(str, Enum):
    """Which link an access token is minted for."""
    share = "share"
    exam = "exam"
