"""Access control guard composing token verification and principal resolution."""

from __future__ import annotations

import logging

from newsroom.adapters.auth import TokenExpiredError, TokenMalformedError, TokenService
from newsroom.core.logging_safety import safe_log_identifier
from newsroom.errors import FailureKind, ServiceError
from newsroom.repositories.memory import PersistenceError
from newsroom.schemas.auth import AdminPrincipal, RoleRequirement, UserPrincipal
from newsroom.services.principals import PrincipalResolver

logger = logging.getLogger(__name__)


class AccessGuard:
    def __init__(self, tokens: TokenService, resolver: PrincipalResolver) -> None:
        self._tokens = tokens
        self._resolver = resolver

    def authenticate(
        self,
        token: str | None,
        requirement: RoleRequirement,
    ) -> AdminPrincipal | UserPrincipal | None:
        """Gate an operation on ``requirement``; anonymous access resolves to ``None``."""
        if requirement is RoleRequirement.ANONYMOUS:
            return None

        if not token:
            raise ServiceError(FailureKind.UNAUTHENTICATED, "Access token required")

        try:
            claims = self._tokens.verify(token)
        except TokenExpiredError as exc:
            raise ServiceError(FailureKind.INVALID_TOKEN, "Token expired", code="TOKEN_EXPIRED") from exc
        except TokenMalformedError as exc:
            raise ServiceError(FailureKind.INVALID_TOKEN, "Invalid token", code="TOKEN_INVALID") from exc

        try:
            return self._resolver.resolve(claims.principal_id, requirement)
        except ServiceError as exc:
            if exc.kind is not FailureKind.NOT_FOUND:
                raise
            raise ServiceError(FailureKind.UNAUTHENTICATED, exc.message) from exc
        except PersistenceError as exc:
            logger.error(
                "auth.lookup_failed principal_id=%s requirement=%s reason=%s",
                safe_log_identifier(claims.principal_id, prefix="pid"),
                requirement.value,
                type(exc).__name__,
            )
            raise ServiceError(
                FailureKind.INTERNAL_FAILURE,
                "Server error during authentication",
            ) from exc
