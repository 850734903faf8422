"""Pagination, filtering and search shared by public, owner and admin listings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
import math

from newsroom.repositories.memory import ArticleRecord, InMemoryStore, UserRecord
from newsroom.schemas.article import ArticleStatus

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

_EPOCH = datetime.min.replace(tzinfo=UTC)


class ListingOrder(str, Enum):
    PUBLISHED_DESC = "published_desc"
    CREATED_DESC = "created_desc"


@dataclass(frozen=True, slots=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if not 1 <= self.limit <= MAX_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_LIMIT}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True, slots=True)
class PageInfo:
    total: int
    total_pages: int
    current_page: int


def page_info(total: int, request: PageRequest) -> PageInfo:
    return PageInfo(
        total=total,
        total_pages=math.ceil(total / request.limit),
        current_page=request.page,
    )


def parse_status_filter(raw: str | None) -> ArticleStatus | None:
    """Unknown status values are ignored rather than rejected."""
    if raw is None:
        return None
    try:
        return ArticleStatus(raw.strip().lower())
    except ValueError:
        return None


def _normalized_term(raw: str | None) -> str | None:
    if raw is None:
        return None
    term = raw.strip().casefold()
    return term or None


def _normalized_category(raw: str | None) -> str | None:
    if raw is None:
        return None
    return raw.strip().lower() or None


@dataclass(frozen=True, slots=True)
class ArticleFilter:
    status: ArticleStatus | None = None
    author_id: str | None = None
    search: str | None = None
    category: str | None = None

    @classmethod
    def public(cls, *, search: str | None = None, category: str | None = None) -> ArticleFilter:
        return cls(
            status=ArticleStatus.PUBLISHED,
            search=_normalized_term(search),
            category=_normalized_category(category),
        )

    @classmethod
    def admin(
        cls,
        *,
        status: str | None = None,
        search: str | None = None,
        category: str | None = None,
    ) -> ArticleFilter:
        return cls(
            status=parse_status_filter(status),
            search=_normalized_term(search),
            category=_normalized_category(category),
        )

    @classmethod
    def owner(cls, author_id: str, *, status: str | None = None) -> ArticleFilter:
        return cls(status=parse_status_filter(status), author_id=author_id)

    def matches(self, record: ArticleRecord) -> bool:
        if self.status is not None and record.status is not self.status:
            return False
        if self.author_id is not None and record.author_id != self.author_id:
            return False
        if self.category is not None and self.category not in record.category_tags:
            return False
        if self.search is not None:
            haystacks = [record.title, record.short_description, *record.category_tags]
            if not any(self.search in text.casefold() for text in haystacks):
                return False
        return True


def _order_key(order: ListingOrder):
    if order is ListingOrder.PUBLISHED_DESC:
        return lambda record: record.published_date or _EPOCH
    return lambda record: record.created_at


def page_articles(
    store: InMemoryStore,
    article_filter: ArticleFilter,
    request: PageRequest,
    *,
    order: ListingOrder,
) -> tuple[list[ArticleRecord], PageInfo]:
    """Return one page of matching articles; pages past the end are empty."""
    records = store.find_articles(
        where=article_filter.matches,
        order_by=_order_key(order),
        skip=request.offset,
        limit=request.limit,
    )
    total = store.count_articles(article_filter.matches)
    return records, page_info(total, request)


def user_search_filter(search: str | None):
    term = _normalized_term(search)
    if term is None:
        return None
    return lambda user: term in user.username.casefold() or term in user.email.casefold()


def page_users(
    store: InMemoryStore,
    request: PageRequest,
    *,
    search: str | None = None,
) -> tuple[list[UserRecord], PageInfo]:
    where = user_search_filter(search)
    records = store.find_users(
        where=where,
        order_by=lambda user: user.created_at,
        skip=request.offset,
        limit=request.limit,
    )
    return records, page_info(store.count_users(where), request)
