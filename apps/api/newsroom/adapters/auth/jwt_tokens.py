"""JWT-backed identity token service."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import jwt

from newsroom.adapters.auth.base import (
    DEFAULT_TOKEN_TTL,
    IssuedToken,
    TokenClaims,
    TokenExpiredError,
    TokenMalformedError,
    TokenService,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class JwtTokenService(TokenService):
    """Signs ``{sub, iat, exp}`` claims with a process-wide HMAC secret.

    The secret is handed in at construction; verification is stateless, so a
    token stays valid until ``exp`` regardless of what happens server-side.
    """

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        default_ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._default_ttl = default_ttl
        self._clock = clock

    def issue(self, principal_id: str, ttl: timedelta | None = None) -> IssuedToken:
        issued_at = self._clock()
        expires_at = issued_at + (ttl if ttl is not None else self._default_ttl)
        payload = {
            "sub": str(principal_id),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return IssuedToken(token=token, expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC))

    def verify(self, token: str) -> TokenClaims:
        try:
            decoded = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenMalformedError("Invalid token") from exc

        principal_id = str(decoded.get("sub") or "").strip()
        if not principal_id:
            raise TokenMalformedError("Token missing principal identity")

        return TokenClaims(
            principal_id=principal_id,
            expires_at=datetime.fromtimestamp(decoded["exp"], tz=UTC),
        )


__all__ = ["JwtTokenService"]
