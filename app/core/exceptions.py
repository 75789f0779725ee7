"""Domain errors raised by the interview services.

Every failure of the access gate is a distinct exception type so callers
can render a precise message.  Routers translate them to HTTP responses.
"""

from __future__ import annotations

from datetime import datetime


class AccessGateError(Exception):
    """Base class for all interview access failures."""

    message: str = "Interview access failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidToken(AccessGateError):
    """Token is malformed, unsigned, or signed with another secret."""

    message = "Invalid token"


class TokenExpired(AccessGateError):
    """Token signature is valid but its expiry has passed."""

    message = "Token has expired. Please request a new interview link."


class JobNotFound(AccessGateError):
    """The job posting referenced by the token no longer exists."""

    message = "Job post not found"

    def __init__(self, job_post_id: int) -> None:
        super().__init__()
        self.job_post_id = job_post_id


class NotYetOpen(AccessGateError):
    """The interview has a scheduled start time in the future."""

    def __init__(self, scheduled_at: datetime) -> None:
        super().__init__(
            f"This interview opens at {scheduled_at.isoformat()}. "
            "Please try again after the scheduled start time."
        )
        self.scheduled_at = scheduled_at


class AccessDenied(AccessGateError):
    """The email is not on the job's allow-list."""

    message = (
        "Access denied. Your email is not authorized for this interview. "
        "Please contact HR."
    )


class AlreadyCompleted(AccessGateError):
    """The candidate already submitted this interview."""

    message = "You have already completed this interview or it is under review."


class StorageUnavailable(AccessGateError):
    """The backing store could not be reached or failed mid-call."""

    message = "Storage is temporarily unavailable"


class CandidateNotFound(AccessGateError):
    message = "Candidate not found"


class InvalidStatusTransition(AccessGateError):
    """A candidate status change is not allowed by the transition table."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move candidate from '{current}' to '{target}'")
        self.current = current
        self.target = target
