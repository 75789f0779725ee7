"""Request / response models for the interview access endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.models.candidate import Candidate, ProfileUpdates
from app.models.enums import TokenKind
from app.models.job_post import CandidateQuestion


# --- Tokens ---

class AccessToken(BaseModel):
    """Signed credential granting "may attempt to join job X"."""
    token: str
    job_post_id: int
    issued_at: datetime
    expires_at: datetime


class TokenClaims(BaseModel):
    """Verified claims extracted from an access token."""
    job_post_id: int
    issued_at: datetime
    expires_at: datetime


class TokenRequest(BaseModel):
    """Body for POST /api/v1/interviews/tokens."""
    job_post_id: int
    kind: TokenKind = TokenKind.exam


class TokenResponse(BaseModel):
    token: str
    expires_at: datetime
    link: str


class PreviewRequest(BaseModel):
    """Body for POST /api/v1/interviews/preview."""
    token: str = Field(min_length=1)


# --- Join ---

class JoinRequest(ProfileUpdates):
    """Body for POST /api/v1/interviews/join: credentials plus profile."""
    token: str = Field(min_length=1)
    email: str = Field(min_length=1)

    def profile_updates(self) -> ProfileUpdates:
        return ProfileUpdates.model_validate(
            self.model_dump(exclude={"token", "email"})
        )


class JoinCommit(BaseModel):
    """Outcome of the atomic join write."""
    candidate: Candidate
    applicants: int
    first_join: bool


class JoinResult(BaseModel):
    """Successful join: everything the interview client needs."""
    message: str = "Access granted successfully"
    job_post_id: int
    job_title: str
    applicants: int
    questions: list[CandidateQuestion] = []
    candidate_id: int
    candidate_name: str
