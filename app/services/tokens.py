"""Interview access tokens (JWT via PyJWT).

Tokens carry only ``job_post_id``, ``iat`` and ``exp``.  Expiry is judged
against the caller's clock rather than PyJWT's wall clock so the access gate
can be driven by an injected time source.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import jwt

from app.core.config import settings
from app.core.exceptions import InvalidToken, TokenExpired
from app.models.access import AccessToken, TokenClaims
from app.models.enums import TokenKind

logger = logging.getLogger(__name__)

JOB_POST_CLAIM = "job_post_id"


def utcnow() -> datetime:
    """Default clock: timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def ttl_for(kind: TokenKind) -> timedelta:
    """Return the lifetime configured for a share or exam link."""
    if kind is TokenKind.share:
        return timedelta(days=settings.SHARE_LINK_TTL_DAYS)
    return timedelta(days=settings.EXAM_LINK_TTL_DAYS)


class TokenService:
    """Signs and verifies access tokens with a shared secret."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    def sign(
        self,
        job_post_id: int,
        ttl: timedelta,
        now: datetime | None = None,
    ) -> AccessToken:
        """Issue a token for ``job_post_id`` valid for ``ttl`` from ``now``."""
        issued_at = (now or utcnow()).replace(microsecond=0)
        expires_at = issued_at + ttl
        token = jwt.encode(
            {
                JOB_POST_CLAIM: job_post_id,
                "iat": int(issued_at.timestamp()),
                "exp": int(expires_at.timestamp()),
            },
            self._secret,
            algorithm=self._algorithm,
        )
        return AccessToken(
            token=token,
            job_post_id=job_post_id,
            issued_at=issued_at,
            expires_at=expires_at,
        )

    def verify(self, token: str, now: datetime | None = None) -> TokenClaims:
        """Check signature and expiry, returning the trusted claims.

        Raises ``InvalidToken`` for anything that does not decode with our
        secret and ``TokenExpired`` once ``now`` reaches ``exp``.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "require": ["exp", "iat", JOB_POST_CLAIM],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as exc:
            logger.info("access_token_rejected", extra={"reason": str(exc)})
            raise InvalidToken() from exc

        job_post_id = payload[JOB_POST_CLAIM]
        if not isinstance(job_post_id, int) or isinstance(job_post_id, bool):
            raise InvalidToken()

        expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        if (now or utcnow()) >= expires_at:
            raise TokenExpired()

        return TokenClaims(
            job_post_id=job_post_id,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=expires_at,
        )


def get_token_service() -> TokenService:
    """Build the service from ``settings``; used as a FastAPI dependency."""
    return TokenService(settings.LINK_TOKEN_SECRET, settings.LINK_TOKEN_ALGORITHM)


def issue_token(
    job_post_id: int,
    ttl: timedelta,
    now: datetime | None = None,
) -> AccessToken:
    """Pure function of (claims, secret, ttl): no store access."""
    return get_token_service().sign(job_post_id, ttl, now=now)
