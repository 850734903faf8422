"""Identity token service interfaces."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta

DEFAULT_TOKEN_TTL = timedelta(hours=24)


class TokenError(Exception):
    """Raised when a token cannot be verified."""


class TokenMalformedError(TokenError):
    """Signature, structure or claims are invalid."""


class TokenExpiredError(TokenError):
    """Token was valid but its embedded expiry has passed."""


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class TokenClaims:
    principal_id: str
    expires_at: datetime


class TokenService(ABC):
    """Issues and verifies signed, time-limited identity assertions."""

    @abstractmethod
    def issue(self, principal_id: str, ttl: timedelta | None = None) -> IssuedToken:
        """Sign a token binding ``principal_id`` to an absolute expiry.

        ``ttl`` defaults to the service lifetime (24 hours unless configured).
        """

    @abstractmethod
    def verify(self, token: str) -> TokenClaims:
        """Return embedded claims or raise a ``TokenError`` subclass."""


__all__ = [
    "DEFAULT_TOKEN_TTL",
    "IssuedToken",
    "TokenClaims",
    "TokenError",
    "TokenExpiredError",
    "TokenMalformedError",
    "TokenService",
]
