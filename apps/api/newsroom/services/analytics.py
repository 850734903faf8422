"""Read-only rollups over the article and user corpus."""

from collections import Counter
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from newsroom.repositories.memory import ArticleRecord, InMemoryStore
from newsroom.schemas.analytics import (
    AnalyticsPeriod,
    AnalyticsReport,
    AuthorRanking,
    CategoryRanking,
    PeriodStats,
)
from newsroom.schemas.article import ArticleStatus
from newsroom.schemas.auth import AdminPrincipal, UserPrincipal
from newsroom.schemas.user import (
    AdminDashboard,
    AdminDashboardStats,
    ArticleStatusCounts,
    RecentArticle,
    UserDashboard,
    UserSummary,
)
from newsroom.services.accounts import principal_to_account

PERIOD_LENGTHS: dict[AnalyticsPeriod, timedelta] = {
    AnalyticsPeriod.WEEK: timedelta(days=7),
    AnalyticsPeriod.MONTH: timedelta(days=30),
    AnalyticsPeriod.YEAR: timedelta(days=365),
}
DEFAULT_PERIOD = AnalyticsPeriod.MONTH
TOP_AUTHOR_LIMIT = 5
TOP_CATEGORY_LIMIT = 10
ADMIN_RECENT_ARTICLES = 10
ADMIN_RECENT_USERS = 5
USER_RECENT_ARTICLES = 5


def _utcnow() -> datetime:
    return datetime.now(UTC)


def parse_period(raw: str | None) -> AnalyticsPeriod:
    """Unknown periods fall back to the monthly window."""
    if raw is None:
        return DEFAULT_PERIOD
    try:
        return AnalyticsPeriod(raw.strip().lower())
    except ValueError:
        return DEFAULT_PERIOD


def _is_published(record: ArticleRecord) -> bool:
    return record.status is ArticleStatus.PUBLISHED


def _ranked(counter: Counter) -> list[tuple[str, int]]:
    # Counter keeps first-seen order and sorted() is stable, so ties stay put.
    return sorted(counter.items(), key=lambda item: item[1], reverse=True)


class AnalyticsService:
    def __init__(self, store: InMemoryStore, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._clock = clock

    def report(self, period: str | None = None) -> AnalyticsReport:
        effective_period = parse_period(period)
        end_date = self._clock()
        start_date = end_date - PERIOD_LENGTHS[effective_period]

        def in_window(moment: datetime | None) -> bool:
            return moment is not None and start_date <= moment <= end_date

        stats = PeriodStats(
            articles_in_period=self._store.count_articles(lambda record: in_window(record.created_at)),
            published_in_period=self._store.count_articles(
                lambda record: _is_published(record) and in_window(record.created_at)
            ),
            users_in_period=self._store.count_users(lambda user: in_window(user.created_at)),
        )

        published = self._store.find_articles(
            where=_is_published,
            order_by=lambda record: record.created_at,
            descending=False,
        )
        return AnalyticsReport(
            period=effective_period,
            start_date=start_date,
            end_date=end_date,
            stats=stats,
            top_authors=self._top_authors(published),
            popular_categories=self._popular_categories(published),
        )

    def _popular_categories(self, published: list[ArticleRecord]) -> list[CategoryRanking]:
        counts = Counter(tag for record in published for tag in record.category_tags)
        return [
            CategoryRanking(category=tag, count=count) for tag, count in _ranked(counts)[:TOP_CATEGORY_LIMIT]
        ]

    def _top_authors(self, published: list[ArticleRecord]) -> list[AuthorRanking]:
        rankings: list[AuthorRanking] = []
        for author_id, count in _ranked(Counter(record.author_id for record in published)):
            # Authors removed from the user store drop out of the ranking.
            user = self._store.get_user(author_id)
            if user is None:
                continue
            rankings.append(AuthorRanking(id=user.id, username=user.username, email=user.email, count=count))
            if len(rankings) == TOP_AUTHOR_LIMIT:
                break
        return rankings

    def admin_dashboard(self, *, actor: AdminPrincipal) -> AdminDashboard:
        counts = self._status_counts()
        recent = self._store.find_articles(order_by=lambda record: record.created_at, limit=ADMIN_RECENT_ARTICLES)
        recent_users = self._store.find_users(order_by=lambda user: user.created_at, limit=ADMIN_RECENT_USERS)
        return AdminDashboard(
            admin=principal_to_account(actor),
            stats=AdminDashboardStats(**counts.model_dump(), total_users=self._store.count_users()),
            recent_articles=[self._recent(record, with_author=True) for record in recent],
            recent_users=[
                UserSummary(id=user.id, username=user.username, email=user.email, created_at=user.created_at)
                for user in recent_users
            ],
        )

    def user_dashboard(self, *, actor: UserPrincipal) -> UserDashboard:
        recent = self._store.find_articles(
            where=lambda record: record.author_id == actor.id,
            order_by=lambda record: record.created_at,
            limit=USER_RECENT_ARTICLES,
        )
        return UserDashboard(
            user=principal_to_account(actor),
            stats=self._status_counts(author_id=actor.id),
            recent_articles=[self._recent(record, with_author=False) for record in recent],
        )

    def _status_counts(self, *, author_id: str | None = None) -> ArticleStatusCounts:
        def owned(record: ArticleRecord) -> bool:
            return author_id is None or record.author_id == author_id

        def with_status(status: ArticleStatus) -> int:
            return self._store.count_articles(lambda record: owned(record) and record.status is status)

        return ArticleStatusCounts(
            total_articles=self._store.count_articles(owned),
            pending_articles=with_status(ArticleStatus.PENDING),
            published_articles=with_status(ArticleStatus.PUBLISHED),
            rejected_articles=with_status(ArticleStatus.REJECTED),
        )

    def _recent(self, record: ArticleRecord, *, with_author: bool) -> RecentArticle:
        author_username = None
        if with_author:
            author = self._store.get_user(record.author_id)
            author_username = author.username if author is not None else None
        return RecentArticle(
            id=record.id,
            title=record.title,
            status=record.status,
            created_at=record.created_at,
            author_username=author_username,
        )
