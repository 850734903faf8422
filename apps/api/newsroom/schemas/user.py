"""User directory and dashboard schemas."""

from datetime import datetime

from pydantic import BaseModel

from newsroom.schemas.article import Article, ArticleStatus
from newsroom.schemas.auth import Account


class UserSummary(BaseModel):
    id: str
    username: str
    email: str
    created_at: datetime


class UserWithStats(UserSummary):
    article_count: int
    published_count: int


class UserPage(BaseModel):
    users: list[UserWithStats]
    total_pages: int
    current_page: int
    total: int


class UserArticlesPage(BaseModel):
    user: UserSummary
    articles: list[Article]
    total_pages: int
    current_page: int
    total: int


class RecentArticle(BaseModel):
    id: str
    title: str
    status: ArticleStatus
    created_at: datetime
    author_username: str | None = None


class ArticleStatusCounts(BaseModel):
    total_articles: int
    pending_articles: int
    published_articles: int
    rejected_articles: int


class AdminDashboardStats(ArticleStatusCounts):
    total_users: int


class AdminDashboard(BaseModel):
    admin: Account
    stats: AdminDashboardStats
    recent_articles: list[RecentArticle]
    recent_users: list[UserSummary]


class UserDashboard(BaseModel):
    user: Account
    stats: ArticleStatusCounts
    recent_articles: list[RecentArticle]
