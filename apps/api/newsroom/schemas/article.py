"""Article API schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

TITLE_MAX_LENGTH = 200
SHORT_DESCRIPTION_MAX_LENGTH = 500


class ArticleStatus(str, Enum):
    PENDING = "pending"
    PUBLISHED = "published"
    REJECTED = "rejected"


def normalize_category_tags(tags: list[str]) -> list[str]:
    """Lowercase, trim and de-duplicate tags, keeping first-seen order."""
    normalized: list[str] = []
    for tag in tags:
        cleaned = tag.strip().lower()
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return normalized


def _strip_required(value: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError("Field must not be blank")
    return stripped


class CreateArticleRequest(BaseModel):
    cover_image: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    short_description: str = Field(min_length=1, max_length=SHORT_DESCRIPTION_MAX_LENGTH)
    full_description: str = Field(min_length=1)
    category_tags: list[str] = Field(default_factory=list)

    @field_validator("cover_image", "title", "short_description", "full_description")
    @classmethod
    def _strip(cls, value: str) -> str:
        return _strip_required(value)

    @field_validator("category_tags")
    @classmethod
    def _normalize_tags(cls, value: list[str]) -> list[str]:
        return normalize_category_tags(value)


class UpdateArticleRequest(BaseModel):
    cover_image: str | None = Field(default=None, min_length=1)
    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    short_description: str | None = Field(
        default=None,
        min_length=1,
        max_length=SHORT_DESCRIPTION_MAX_LENGTH,
    )
    full_description: str | None = Field(default=None, min_length=1)
    category_tags: list[str] | None = None

    @field_validator("cover_image", "title", "short_description", "full_description")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _strip_required(value)

    @field_validator("category_tags")
    @classmethod
    def _normalize_tags(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return normalize_category_tags(value)

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)


class ReviewDecisionRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)

    @field_validator("reason")
    @classmethod
    def _blank_reason_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class ArticleAuthor(BaseModel):
    id: str
    username: str | None = None
    email: str | None = None


class ArticleSummary(BaseModel):
    id: str
    author: ArticleAuthor
    cover_image: str
    title: str
    short_description: str
    category_tags: list[str]
    status: ArticleStatus
    rejection_reason: str | None = None
    published_date: datetime | None = None
    created_at: datetime
    updated_at: datetime


class Article(ArticleSummary):
    full_description: str


class ArticlePage(BaseModel):
    articles: list[Article]
    total_pages: int
    current_page: int
    total: int


class ArticleSummaryPage(BaseModel):
    articles: list[ArticleSummary]
    total_pages: int
    current_page: int
    total: int
