"""In-memory repositories used by the API and tests."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TypeVar
from uuid import uuid4

from newsroom.schemas.article import ArticleStatus

RecordT = TypeVar("RecordT")


class PersistenceError(RuntimeError):
    """Raised when the storage backend cannot complete an operation."""


@dataclass(slots=True)
class AdminRecord:
    id: str
    username: str
    email: str
    password_hash: str
    created_at: datetime


@dataclass(slots=True)
class UserRecord:
    id: str
    username: str
    email: str
    password_hash: str
    created_at: datetime


@dataclass(slots=True)
class ArticleRecord:
    id: str
    author_id: str
    cover_image: str
    title: str
    short_description: str
    full_description: str
    category_tags: list[str]
    status: ArticleStatus
    created_at: datetime
    updated_at: datetime
    rejection_reason: str | None = None
    published_date: datetime | None = None


def _select(
    records: list[RecordT],
    *,
    where: Callable[[RecordT], bool] | None,
    order_by: Callable[[RecordT], Any] | None,
    descending: bool,
    skip: int,
    limit: int | None,
) -> list[RecordT]:
    selected = [record for record in records if where is None or where(record)]
    if order_by is not None:
        if descending:
            # Newest insertion first among equal keys; sorted() is stable under reverse.
            selected.reverse()
        selected = sorted(selected, key=order_by, reverse=descending)
    end = None if limit is None else skip + limit
    return selected[skip:end]


@dataclass(slots=True)
class InMemoryStore:
    """Deterministic persistence layer with single-record atomic operations."""

    admins: dict[str, AdminRecord] = field(default_factory=dict)
    users: dict[str, UserRecord] = field(default_factory=dict)
    articles: dict[str, ArticleRecord] = field(default_factory=dict)
    principal_write_count: int = 0
    article_write_count: int = 0
    failure_message: str | None = None

    def _maybe_fail(self) -> None:
        if self.failure_message is None:
            return
        message = self.failure_message
        self.failure_message = None
        raise PersistenceError(message)

    # Admins

    def create_admin(self, *, username: str, email: str, password_hash: str) -> AdminRecord:
        self._maybe_fail()
        admin = AdminRecord(
            id=str(uuid4()),
            username=username,
            email=email,
            password_hash=password_hash,
            created_at=datetime.now(UTC),
        )
        self.admins[admin.id] = admin
        self.principal_write_count += 1
        return admin

    def get_admin(self, admin_id: str) -> AdminRecord | None:
        self._maybe_fail()
        return self.admins.get(admin_id)

    def find_admin_by_email(self, email: str) -> AdminRecord | None:
        self._maybe_fail()
        return next((admin for admin in self.admins.values() if admin.email == email), None)

    def find_admin_by_identity(self, *, username: str, email: str) -> AdminRecord | None:
        self._maybe_fail()
        return next(
            (admin for admin in self.admins.values() if admin.username == username or admin.email == email),
            None,
        )

    # Users

    def create_user(self, *, username: str, email: str, password_hash: str) -> UserRecord:
        self._maybe_fail()
        user = UserRecord(
            id=str(uuid4()),
            username=username,
            email=email,
            password_hash=password_hash,
            created_at=datetime.now(UTC),
        )
        self.users[user.id] = user
        self.principal_write_count += 1
        return user

    def get_user(self, user_id: str) -> UserRecord | None:
        self._maybe_fail()
        return self.users.get(user_id)

    def find_user_by_email(self, email: str) -> UserRecord | None:
        self._maybe_fail()
        return next((user for user in self.users.values() if user.email == email), None)

    def find_user_by_identity(self, *, username: str, email: str) -> UserRecord | None:
        self._maybe_fail()
        return next(
            (user for user in self.users.values() if user.username == username or user.email == email),
            None,
        )

    def update_user_password(self, *, user_id: str, password_hash: str) -> None:
        self._maybe_fail()
        user = self.users.get(user_id)
        if user is None:
            raise PersistenceError(f"User {user_id} disappeared during update")
        user.password_hash = password_hash
        self.principal_write_count += 1

    def find_users(
        self,
        *,
        where: Callable[[UserRecord], bool] | None = None,
        order_by: Callable[[UserRecord], Any] | None = None,
        descending: bool = True,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[UserRecord]:
        self._maybe_fail()
        return _select(
            list(self.users.values()),
            where=where,
            order_by=order_by,
            descending=descending,
            skip=skip,
            limit=limit,
        )

    def count_users(self, where: Callable[[UserRecord], bool] | None = None) -> int:
        self._maybe_fail()
        return sum(1 for user in self.users.values() if where is None or where(user))

    # Articles

    def create_article(
        self,
        *,
        author_id: str,
        cover_image: str,
        title: str,
        short_description: str,
        full_description: str,
        category_tags: list[str],
        status: ArticleStatus,
    ) -> ArticleRecord:
        self._maybe_fail()
        now = datetime.now(UTC)
        article = ArticleRecord(
            id=str(uuid4()),
            author_id=author_id,
            cover_image=cover_image,
            title=title,
            short_description=short_description,
            full_description=full_description,
            category_tags=list(category_tags),
            status=status,
            created_at=now,
            updated_at=now,
        )
        self.articles[article.id] = article
        self.article_write_count += 1
        return article

    def get_article(self, article_id: str) -> ArticleRecord | None:
        self._maybe_fail()
        return self.articles.get(article_id)

    def save_article(self, article: ArticleRecord) -> None:
        """Persist an already-validated mutation and stamp ``updated_at``."""
        self._maybe_fail()
        if article.id not in self.articles:
            raise PersistenceError(f"Article {article.id} disappeared during update")
        article.updated_at = datetime.now(UTC)
        self.articles[article.id] = article
        self.article_write_count += 1

    def delete_article(self, article_id: str) -> ArticleRecord | None:
        self._maybe_fail()
        article = self.articles.pop(article_id, None)
        if article is not None:
            self.article_write_count += 1
        return article

    def find_articles(
        self,
        *,
        where: Callable[[ArticleRecord], bool] | None = None,
        order_by: Callable[[ArticleRecord], Any] | None = None,
        descending: bool = True,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[ArticleRecord]:
        self._maybe_fail()
        return _select(
            list(self.articles.values()),
            where=where,
            order_by=order_by,
            descending=descending,
            skip=skip,
            limit=limit,
        )

    def count_articles(self, where: Callable[[ArticleRecord], bool] | None = None) -> int:
        self._maybe_fail()
        return sum(1 for article in self.articles.values() if where is None or where(article))
