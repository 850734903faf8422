"""Article service layer."""

from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import UTC, datetime
import logging

from newsroom.core.logging_safety import safe_log_identifier
from newsroom.domain.article_fsm import INITIAL_STATUS, ArticleAction, ensure_transition, status_after_edit
from newsroom.errors import FailureKind, ServiceError, forbidden, not_found
from newsroom.repositories.memory import ArticleRecord, InMemoryStore
from newsroom.schemas.article import (
    Article,
    ArticleAuthor,
    ArticlePage,
    ArticleStatus,
    ArticleSummary,
    ArticleSummaryPage,
    CreateArticleRequest,
    UpdateArticleRequest,
)
from newsroom.schemas.auth import AdminPrincipal, Role, UserPrincipal
from newsroom.services.listing import ArticleFilter, ListingOrder, PageRequest, page_articles

logger = logging.getLogger(__name__)

Actor = AdminPrincipal | UserPrincipal


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ArticleService:
    def __init__(self, store: InMemoryStore, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._clock = clock

    # Authoring

    def create_article(self, *, actor: Actor, payload: CreateArticleRequest) -> Article:
        if actor.role is not Role.USER:
            raise forbidden("Only authors can create articles")

        record = self._store.create_article(
            author_id=actor.id,
            cover_image=payload.cover_image,
            title=payload.title,
            short_description=payload.short_description,
            full_description=payload.full_description,
            category_tags=payload.category_tags,
            status=INITIAL_STATUS,
        )
        logger.info(
            "article.created article_id=%s author_id=%s",
            safe_log_identifier(record.id, prefix="aid"),
            safe_log_identifier(actor.id, prefix="pid"),
        )
        return self._to_article(record)

    def update_article(self, *, actor: Actor, article_id: str, payload: UpdateArticleRequest) -> Article:
        record = self._require_article(article_id)
        if actor.role is not Role.USER or record.author_id != actor.id:
            raise forbidden("You don't have permission to edit this article")

        next_status = status_after_edit(record.status)
        changes = payload.changes()
        if not changes:
            raise ServiceError(FailureKind.VALIDATION_ERROR, "No article fields provided")

        previous_status = record.status
        updated = replace(record, **changes, status=next_status)
        self._store.save_article(updated)

        if previous_status is not updated.status:
            logger.info(
                "article.resubmitted article_id=%s prev_status=%s status=%s",
                safe_log_identifier(updated.id, prefix="aid"),
                previous_status.value,
                updated.status.value,
            )
        return self._to_article(updated)

    def delete_article(self, *, actor: Actor, article_id: str) -> None:
        """Admins may delete anything; authors only their own articles."""
        record = self._require_article(article_id)
        if actor.role is Role.USER and record.author_id != actor.id:
            raise forbidden("You don't have permission to delete this article")

        if self._store.delete_article(record.id) is None:
            raise not_found("Article not found")
        logger.info(
            "article.deleted article_id=%s actor_role=%s status=%s",
            safe_log_identifier(record.id, prefix="aid"),
            actor.role.value,
            record.status.value,
        )

    # Moderation

    def approve_article(self, *, actor: Actor, article_id: str) -> Article:
        record = self._require_article(article_id)
        target = ensure_transition(record.status, ArticleAction.APPROVE, actor.role)
        return self._apply_decision(
            record,
            ArticleAction.APPROVE,
            replace(record, status=target, published_date=self._clock(), rejection_reason=None),
        )

    def reject_article(self, *, actor: Actor, article_id: str, reason: str | None = None) -> Article:
        record = self._require_article(article_id)
        target = ensure_transition(record.status, ArticleAction.REJECT, actor.role)
        return self._apply_decision(
            record,
            ArticleAction.REJECT,
            replace(record, status=target, rejection_reason=reason),
        )

    def unpublish_article(self, *, actor: Actor, article_id: str, reason: str | None = None) -> Article:
        record = self._require_article(article_id)
        target = ensure_transition(record.status, ArticleAction.UNPUBLISH, actor.role)
        return self._apply_decision(
            record,
            ArticleAction.UNPUBLISH,
            replace(record, status=target, rejection_reason=reason),
        )

    def _apply_decision(self, record: ArticleRecord, action: ArticleAction, updated: ArticleRecord) -> Article:
        self._store.save_article(updated)
        logger.info(
            "article.%s article_id=%s prev_status=%s status=%s",
            action.value,
            safe_log_identifier(updated.id, prefix="aid"),
            record.status.value,
            updated.status.value,
        )
        return self._to_article(updated)

    # Reads

    def get_published_article(self, *, article_id: str) -> Article:
        record = self._store.get_article(article_id)
        if record is None or record.status is not ArticleStatus.PUBLISHED:
            raise not_found("Article not found or not published")
        return self._to_article(record)

    def get_article_for_review(self, *, actor: Actor, article_id: str) -> Article:
        record = self._require_article(article_id)
        if actor.role is not Role.ADMIN and record.author_id != actor.id:
            raise not_found("Article not found")
        return self._to_article(record)

    def list_published(
        self,
        *,
        page: PageRequest,
        search: str | None = None,
        category: str | None = None,
    ) -> ArticleSummaryPage:
        records, info = page_articles(
            self._store,
            ArticleFilter.public(search=search, category=category),
            page,
            order=ListingOrder.PUBLISHED_DESC,
        )
        return ArticleSummaryPage(
            articles=self._to_summaries(records),
            total_pages=info.total_pages,
            current_page=info.current_page,
            total=info.total,
        )

    def list_for_admin(
        self,
        *,
        page: PageRequest,
        status: str | None = None,
        search: str | None = None,
        category: str | None = None,
    ) -> ArticlePage:
        return self._article_page(
            ArticleFilter.admin(status=status, search=search, category=category),
            page,
        )

    def list_pending(self, *, page: PageRequest) -> ArticlePage:
        return self._article_page(ArticleFilter(status=ArticleStatus.PENDING), page)

    def list_for_owner(self, *, author_id: str, page: PageRequest, status: str | None = None) -> ArticlePage:
        return self._article_page(ArticleFilter.owner(author_id, status=status), page)

    def _article_page(self, article_filter: ArticleFilter, page: PageRequest) -> ArticlePage:
        records, info = page_articles(self._store, article_filter, page, order=ListingOrder.CREATED_DESC)
        return ArticlePage(
            articles=self._to_articles(records),
            total_pages=info.total_pages,
            current_page=info.current_page,
            total=info.total,
        )

    def _require_article(self, article_id: str) -> ArticleRecord:
        record = self._store.get_article(article_id)
        if record is None:
            raise not_found("Article not found")
        return record

    def _author(self, author_id: str, *, with_email: bool = True) -> ArticleAuthor:
        user = self._store.get_user(author_id)
        if user is None:
            return ArticleAuthor(id=author_id)
        return ArticleAuthor(id=user.id, username=user.username, email=user.email if with_email else None)

    def _to_article(self, record: ArticleRecord) -> Article:
        return Article(
            **self._summary_fields(record, self._author(record.author_id)),
            full_description=record.full_description,
        )

    def _to_articles(self, records: Iterable[ArticleRecord]) -> list[Article]:
        return [self._to_article(record) for record in records]

    def _to_summaries(self, records: Iterable[ArticleRecord]) -> list[ArticleSummary]:
        return [
            ArticleSummary(**self._summary_fields(record, self._author(record.author_id, with_email=False)))
            for record in records
        ]

    @staticmethod
    def _summary_fields(record: ArticleRecord, author: ArticleAuthor) -> dict[str, object]:
        return {
            "id": record.id,
            "author": author,
            "cover_image": record.cover_image,
            "title": record.title,
            "short_description": record.short_description,
            "category_tags": list(record.category_tags),
            "status": record.status,
            "rejection_reason": record.rejection_reason,
            "published_date": record.published_date,
            "created_at": record.created_at,
            "updated_at": record.updated_at,
        }
