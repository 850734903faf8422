"""Admin-facing user directory."""

from newsroom.errors import not_found
from newsroom.repositories.memory import InMemoryStore, UserRecord
from newsroom.schemas.article import ArticleStatus
from newsroom.schemas.user import UserArticlesPage, UserPage, UserSummary, UserWithStats
from newsroom.services.articles import ArticleService
from newsroom.services.listing import PageRequest, page_users


def _summary(record: UserRecord) -> UserSummary:
    return UserSummary(id=record.id, username=record.username, email=record.email, created_at=record.created_at)


class UserDirectoryService:
    def __init__(self, store: InMemoryStore, articles: ArticleService) -> None:
        self._store = store
        self._articles = articles

    def list_users(self, *, page: PageRequest, search: str | None = None) -> UserPage:
        records, info = page_users(self._store, page, search=search)
        return UserPage(
            users=[self._with_stats(record) for record in records],
            total_pages=info.total_pages,
            current_page=info.current_page,
            total=info.total,
        )

    def list_user_articles(
        self,
        *,
        user_id: str,
        page: PageRequest,
        status: str | None = None,
    ) -> UserArticlesPage:
        record = self._store.get_user(user_id)
        if record is None:
            raise not_found("User not found")

        article_page = self._articles.list_for_owner(author_id=record.id, page=page, status=status)
        return UserArticlesPage(
            user=_summary(record),
            articles=article_page.articles,
            total_pages=article_page.total_pages,
            current_page=article_page.current_page,
            total=article_page.total,
        )

    def _with_stats(self, record: UserRecord) -> UserWithStats:
        return UserWithStats(
            id=record.id,
            username=record.username,
            email=record.email,
            created_at=record.created_at,
            article_count=self._store.count_articles(lambda article: article.author_id == record.id),
            published_count=self._store.count_articles(
                lambda article: article.author_id == record.id and article.status is ArticleStatus.PUBLISHED
            ),
        )
