"""Admin routes: authentication, moderation queue, user directory and analytics."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from newsroom.routes.dependencies import (
    get_account_service,
    get_admin_principal,
    get_analytics_service,
    get_article_service,
    get_page_request,
    get_user_directory_service,
)
from newsroom.schemas.analytics import AnalyticsReport
from newsroom.schemas.article import Article, ArticlePage, ReviewDecisionRequest
from newsroom.schemas.auth import AdminPrincipal, AuthSession, LoginRequest, RegisterRequest
from newsroom.schemas.error import ApiResponse, ErrorResponse
from newsroom.schemas.user import AdminDashboard, UserArticlesPage, UserPage
from newsroom.services.accounts import AccountService
from newsroom.services.analytics import AnalyticsService
from newsroom.services.articles import ArticleService
from newsroom.services.listing import PageRequest
from newsroom.services.users import UserDirectoryService

router = APIRouter(prefix="/admin", tags=["Admin"])

_GUARDED = {401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}}
_ARTICLE_ERRORS = {**_GUARDED, 404: {"model": ErrorResponse}}
_DECISION_ERRORS = {**_ARTICLE_ERRORS, 400: {"model": ErrorResponse}}


@router.post(
    "/register",
    response_model=ApiResponse[AuthSession],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def register_admin(
    payload: RegisterRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse[AuthSession]:
    return ApiResponse(message="Admin registered successfully", data=service.register_admin(payload))


@router.post(
    "/login",
    response_model=ApiResponse[AuthSession],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def login_admin(
    payload: LoginRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse[AuthSession]:
    return ApiResponse(message="Admin login successful", data=service.login_admin(payload))


@router.get("/dashboard", response_model=ApiResponse[AdminDashboard], responses=_GUARDED)
async def get_dashboard(
    principal: Annotated[AdminPrincipal, Depends(get_admin_principal)],
    service: Annotated[AnalyticsService, Depends(get_analytics_service)],
) -> ApiResponse[AdminDashboard]:
    return ApiResponse(data=service.admin_dashboard(actor=principal))


@router.get("/articles/pending", response_model=ApiResponse[ArticlePage], responses=_GUARDED)
async def list_pending_articles(
    _: Annotated[AdminPrincipal, Depends(get_admin_principal)],
    page: Annotated[PageRequest, Depends(get_page_request)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> ApiResponse[ArticlePage]:
    return ApiResponse(data=service.list_pending(page=page))


@router.get("/articles", response_model=ApiResponse[ArticlePage], responses=_GUARDED)
async def list_articles(
    _: Annotated[AdminPrincipal, Depends(get_admin_principal)],
    page: Annotated[PageRequest, Depends(get_page_request)],
    service: Annotated[ArticleService, Depends(get_article_service)],
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    search: str | None = None,
    category: str | None = None,
) -> ApiResponse[ArticlePage]:
    return ApiResponse(
        data=service.list_for_admin(page=page, status=status_filter, search=search, category=category)
    )


@router.get("/articles/{articleId}", response_model=ApiResponse[Article], responses=_ARTICLE_ERRORS)
async def get_article(
    article_id: Annotated[str, Path(alias="articleId")],
    principal: Annotated[AdminPrincipal, Depends(get_admin_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> ApiResponse[Article]:
    return ApiResponse(data=service.get_article_for_review(actor=principal, article_id=article_id))


@router.put("/articles/{articleId}/approve", response_model=ApiResponse[Article], responses=_DECISION_ERRORS)
async def approve_article(
    article_id: Annotated[str, Path(alias="articleId")],
    principal: Annotated[AdminPrincipal, Depends(get_admin_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> ApiResponse[Article]:
    article = service.approve_article(actor=principal, article_id=article_id)
    return ApiResponse(message="Article approved and published successfully", data=article)


@router.put("/articles/{articleId}/reject", response_model=ApiResponse[Article], responses=_DECISION_ERRORS)
async def reject_article(
    article_id: Annotated[str, Path(alias="articleId")],
    principal: Annotated[AdminPrincipal, Depends(get_admin_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
    payload: ReviewDecisionRequest | None = None,
) -> ApiResponse[Article]:
    reason = payload.reason if payload is not None else None
    article = service.reject_article(actor=principal, article_id=article_id, reason=reason)
    return ApiResponse(message="Article rejected successfully", data=article)


@router.put("/articles/{articleId}/unpublish", response_model=ApiResponse[Article], responses=_DECISION_ERRORS)
async def unpublish_article(
    article_id: Annotated[str, Path(alias="articleId")],
    principal: Annotated[AdminPrincipal, Depends(get_admin_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
    payload: ReviewDecisionRequest | None = None,
) -> ApiResponse[Article]:
    reason = payload.reason if payload is not None else None
    article = service.unpublish_article(actor=principal, article_id=article_id, reason=reason)
    return ApiResponse(message="Article unpublished successfully", data=article)


@router.delete("/articles/{articleId}", response_model=ApiResponse[None], responses=_ARTICLE_ERRORS)
async def delete_article(
    article_id: Annotated[str, Path(alias="articleId")],
    principal: Annotated[AdminPrincipal, Depends(get_admin_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> ApiResponse[None]:
    service.delete_article(actor=principal, article_id=article_id)
    return ApiResponse(message="Article deleted successfully")


@router.get("/users", response_model=ApiResponse[UserPage], responses=_GUARDED)
async def list_users(
    _: Annotated[AdminPrincipal, Depends(get_admin_principal)],
    page: Annotated[PageRequest, Depends(get_page_request)],
    service: Annotated[UserDirectoryService, Depends(get_user_directory_service)],
    search: str | None = None,
) -> ApiResponse[UserPage]:
    return ApiResponse(data=service.list_users(page=page, search=search))


@router.get(
    "/users/{userId}/articles",
    response_model=ApiResponse[UserArticlesPage],
    responses={**_GUARDED, 404: {"model": ErrorResponse}},
)
async def list_user_articles(
    user_id: Annotated[str, Path(alias="userId")],
    _: Annotated[AdminPrincipal, Depends(get_admin_principal)],
    page: Annotated[PageRequest, Depends(get_page_request)],
    service: Annotated[UserDirectoryService, Depends(get_user_directory_service)],
    status_filter: Annotated[str | None, Query(alias="status")] = None,
) -> ApiResponse[UserArticlesPage]:
    return ApiResponse(data=service.list_user_articles(user_id=user_id, page=page, status=status_filter))


@router.get("/analytics", response_model=ApiResponse[AnalyticsReport], responses=_GUARDED)
async def get_analytics(
    _: Annotated[AdminPrincipal, Depends(get_admin_principal)],
    service: Annotated[AnalyticsService, Depends(get_analytics_service)],
    period: str = "month",
) -> ApiResponse[AnalyticsReport]:
    return ApiResponse(data=service.report(period))
