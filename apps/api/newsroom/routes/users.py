"""User routes: authentication, authoring and the public article feed."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from newsroom.routes.dependencies import (
    get_account_service,
    get_analytics_service,
    get_anonymous_principal,
    get_article_service,
    get_page_request,
    get_user_principal,
)
from newsroom.schemas.article import (
    Article,
    ArticlePage,
    ArticleSummaryPage,
    CreateArticleRequest,
    UpdateArticleRequest,
)
from newsroom.schemas.auth import (
    AuthSession,
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    UserPrincipal,
)
from newsroom.schemas.error import ApiResponse, ErrorResponse
from newsroom.schemas.user import UserDashboard
from newsroom.services.accounts import AccountService
from newsroom.services.analytics import AnalyticsService
from newsroom.services.articles import ArticleService
from newsroom.services.listing import PageRequest

router = APIRouter(prefix="/users", tags=["Users"])

_GUARDED = {401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}}
_OWNED_ARTICLE_ERRORS = {**_GUARDED, 400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


@router.post(
    "/register",
    response_model=ApiResponse[AuthSession],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def register_user(
    payload: RegisterRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse[AuthSession]:
    return ApiResponse(message="User registered successfully", data=service.register_user(payload))


@router.post(
    "/login",
    response_model=ApiResponse[AuthSession],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def login_user(
    payload: LoginRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse[AuthSession]:
    return ApiResponse(message="Login successful", data=service.login_user(payload))


@router.put(
    "/password",
    response_model=ApiResponse[None],
    responses={**_GUARDED, 400: {"model": ErrorResponse}},
)
def change_password(
    payload: ChangePasswordRequest,
    principal: Annotated[UserPrincipal, Depends(get_user_principal)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse[None]:
    service.change_password(actor=principal, payload=payload)
    return ApiResponse(message="Password changed successfully")


@router.get("/dashboard", response_model=ApiResponse[UserDashboard], responses=_GUARDED)
async def get_dashboard(
    principal: Annotated[UserPrincipal, Depends(get_user_principal)],
    service: Annotated[AnalyticsService, Depends(get_analytics_service)],
) -> ApiResponse[UserDashboard]:
    return ApiResponse(data=service.user_dashboard(actor=principal))


@router.get("/articles", response_model=ApiResponse[ArticleSummaryPage])
async def list_published_articles(
    _: Annotated[None, Depends(get_anonymous_principal)],
    page: Annotated[PageRequest, Depends(get_page_request)],
    service: Annotated[ArticleService, Depends(get_article_service)],
    category: str | None = None,
    search: str | None = None,
) -> ApiResponse[ArticleSummaryPage]:
    return ApiResponse(data=service.list_published(page=page, search=search, category=category))


@router.get(
    "/articles/{articleId}",
    response_model=ApiResponse[Article],
    responses={404: {"model": ErrorResponse}},
)
async def get_published_article(
    article_id: Annotated[str, Path(alias="articleId")],
    _: Annotated[None, Depends(get_anonymous_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> ApiResponse[Article]:
    return ApiResponse(data=service.get_published_article(article_id=article_id))


@router.post(
    "/articles",
    response_model=ApiResponse[Article],
    status_code=status.HTTP_201_CREATED,
    responses={**_GUARDED, 400: {"model": ErrorResponse}},
)
async def create_article(
    payload: CreateArticleRequest,
    principal: Annotated[UserPrincipal, Depends(get_user_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> ApiResponse[Article]:
    article = service.create_article(actor=principal, payload=payload)
    return ApiResponse(message="Article created successfully and sent for approval", data=article)


@router.get("/my-articles", response_model=ApiResponse[ArticlePage], responses=_GUARDED)
async def list_my_articles(
    principal: Annotated[UserPrincipal, Depends(get_user_principal)],
    page: Annotated[PageRequest, Depends(get_page_request)],
    service: Annotated[ArticleService, Depends(get_article_service)],
    status_filter: Annotated[str | None, Query(alias="status")] = None,
) -> ApiResponse[ArticlePage]:
    return ApiResponse(data=service.list_for_owner(author_id=principal.id, page=page, status=status_filter))


@router.put("/articles/{articleId}", response_model=ApiResponse[Article], responses=_OWNED_ARTICLE_ERRORS)
async def update_article(
    article_id: Annotated[str, Path(alias="articleId")],
    payload: UpdateArticleRequest,
    principal: Annotated[UserPrincipal, Depends(get_user_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> ApiResponse[Article]:
    article = service.update_article(actor=principal, article_id=article_id, payload=payload)
    return ApiResponse(message="Article updated successfully", data=article)


@router.delete("/articles/{articleId}", response_model=ApiResponse[None], responses=_OWNED_ARTICLE_ERRORS)
async def delete_article(
    article_id: Annotated[str, Path(alias="articleId")],
    principal: Annotated[UserPrincipal, Depends(get_user_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> ApiResponse[None]:
    service.delete_article(actor=principal, article_id=article_id)
    return ApiResponse(message="Article deleted successfully")
