"""Identity token adapters."""

from .base import (
    DEFAULT_TOKEN_TTL,
    IssuedToken,
    TokenClaims,
    TokenError,
    TokenExpiredError,
    TokenMalformedError,
    TokenService,
)
from .jwt_tokens import JwtTokenService

__all__ = [
    "DEFAULT_TOKEN_TTL",
    "IssuedToken",
    "JwtTokenService",
    "TokenClaims",
    "TokenError",
    "TokenExpiredError",
    "TokenMalformedError",
    "TokenService",
]
