"""Dependency wiring for routes."""

from __future__ import annotations

from datetime import timedelta
import logging
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Query, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from newsroom.adapters.auth import JwtTokenService, TokenService
from newsroom.adapters.hashing import BcryptCredentialHasher, CredentialHasher
from newsroom.core.config import Settings, get_settings
from newsroom.core.logging_safety import safe_log_identifier
from newsroom.errors import ServiceError
from newsroom.repositories.memory import InMemoryStore
from newsroom.schemas.auth import AdminPrincipal, RoleRequirement, UserPrincipal
from newsroom.services.access import AccessGuard
from newsroom.services.accounts import AccountService
from newsroom.services.analytics import AnalyticsService
from newsroom.services.articles import ArticleService
from newsroom.services.listing import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, PageRequest
from newsroom.services.principals import PrincipalResolver
from newsroom.services.users import UserDirectoryService

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")
logger = logging.getLogger(__name__)


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def get_store(request: Request) -> InMemoryStore:
    return request.app.state.store


def get_token_service(settings: Annotated[Settings, Depends(get_settings)]) -> TokenService:
    return JwtTokenService(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        default_ttl=timedelta(hours=settings.token_ttl_hours),
    )


def get_credential_hasher(settings: Annotated[Settings, Depends(get_settings)]) -> CredentialHasher:
    return BcryptCredentialHasher(rounds=settings.bcrypt_rounds)


def get_access_guard(
    store: Annotated[InMemoryStore, Depends(get_store)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AccessGuard:
    return AccessGuard(tokens, PrincipalResolver(store))


async def _authenticate(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
    guard: AccessGuard,
    requirement: RoleRequirement,
) -> AdminPrincipal | UserPrincipal | None:
    """Run the guard and attach the resolved principal to the request context."""
    safe_correlation_id = safe_log_identifier(_request_correlation_id(request), prefix="cid")
    token = credentials.credentials if credentials is not None else None
    try:
        principal = guard.authenticate(token, requirement)
    except ServiceError as exc:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s requirement=%s reason=%s",
            safe_correlation_id,
            request.method,
            request.url.path,
            requirement.value,
            exc.code.lower(),
        )
        raise

    request.state.principal = principal
    request.state.principal_role = principal.role if principal is not None else None
    if principal is not None:
        logger.info(
            "auth.accepted correlation_id=%s method=%s path=%s principal_id=%s role=%s",
            safe_correlation_id,
            request.method,
            request.url.path,
            safe_log_identifier(principal.id, prefix="pid"),
            principal.role.value,
        )
    return principal


async def get_admin_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    guard: Annotated[AccessGuard, Depends(get_access_guard)],
) -> AdminPrincipal:
    return await _authenticate(request, credentials, guard, RoleRequirement.ADMIN)


async def get_user_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    guard: Annotated[AccessGuard, Depends(get_access_guard)],
) -> UserPrincipal:
    return await _authenticate(request, credentials, guard, RoleRequirement.USER)


async def get_any_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    guard: Annotated[AccessGuard, Depends(get_access_guard)],
) -> AdminPrincipal | UserPrincipal:
    return await _authenticate(request, credentials, guard, RoleRequirement.ADMIN_OR_USER)


async def get_anonymous_principal(
    request: Request,
    guard: Annotated[AccessGuard, Depends(get_access_guard)],
) -> None:
    return await _authenticate(request, None, guard, RoleRequirement.ANONYMOUS)


def get_page_request(
    page: Annotated[int, Query(ge=1)] = DEFAULT_PAGE,
    limit: Annotated[int, Query(ge=1, le=MAX_LIMIT)] = DEFAULT_LIMIT,
) -> PageRequest:
    return PageRequest(page=page, limit=limit)


def get_article_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> ArticleService:
    return ArticleService(store)


def get_account_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    hasher: Annotated[CredentialHasher, Depends(get_credential_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AccountService:
    return AccountService(
        store,
        hasher,
        tokens,
        allow_admin_registration=settings.allow_admin_registration,
    )


def get_analytics_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> AnalyticsService:
    return AnalyticsService(store)


def get_user_directory_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    articles: Annotated[ArticleService, Depends(get_article_service)],
) -> UserDirectoryService:
    return UserDirectoryService(store, articles)
