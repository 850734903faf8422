"""Pagination, search and visibility tests for article listings."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import os
import unittest

from fastapi.testclient import TestClient

from newsroom.core.config import get_settings
from newsroom.main import create_app
from newsroom.repositories.memory import InMemoryStore
from newsroom.schemas.article import ArticleStatus, CreateArticleRequest
from newsroom.services.articles import ArticleService
from newsroom.services.listing import ArticleFilter, PageRequest, page_info, parse_status_filter
from newsroom.services.principals import admin_principal, user_principal


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "NEWSROOM_JWT_SECRET",
        "NEWSROOM_BCRYPT_ROUNDS",
        "NEWSROOM_ALLOW_ADMIN_REGISTRATION",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        os.environ["NEWSROOM_JWT_SECRET"] = "test-jwt-secret-0123456789abcdef0123456789"
        os.environ["NEWSROOM_BCRYPT_ROUNDS"] = "4"
        os.environ.pop("NEWSROOM_ALLOW_ADMIN_REGISTRATION", None)
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


def _draft(title: str, *, tags: list[str] | None = None, summary: str = "Short summary") -> CreateArticleRequest:
    return CreateArticleRequest(
        cover_image="https://img.example.com/cover.png",
        title=title,
        short_description=summary,
        full_description=f"Body of {title}",
        category_tags=tags or [],
    )


class _ClockedStoreCase(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.now = datetime(2030, 1, 1, tzinfo=UTC)
        self.service = ArticleService(self.store, clock=lambda: self.now)
        self.admin = admin_principal(
            self.store.create_admin(username="editor", email="editor@example.com", password_hash="x")
        )
        self.author = user_principal(
            self.store.create_user(username="author", email="author@example.com", password_hash="y")
        )

    def _publish(self, title: str, **kwargs) -> str:
        article = self.service.create_article(actor=self.author, payload=_draft(title, **kwargs))
        self.service.approve_article(actor=self.admin, article_id=article.id)
        self.now += timedelta(minutes=1)
        return article.id

    def _submit(self, title: str, **kwargs) -> str:
        return self.service.create_article(actor=self.author, payload=_draft(title, **kwargs)).id


class PublicListingUnitTests(_ClockedStoreCase):
    def test_twenty_five_articles_span_three_pages(self) -> None:
        for index in range(25):
            self._publish(f"Story {index}")

        first = self.service.list_published(page=PageRequest(page=1, limit=10))
        third = self.service.list_published(page=PageRequest(page=3, limit=10))
        beyond = self.service.list_published(page=PageRequest(page=4, limit=10))

        self.assertEqual((first.total, first.total_pages, first.current_page), (25, 3, 1))
        self.assertEqual(len(first.articles), 10)
        self.assertEqual(len(third.articles), 5)
        self.assertEqual(beyond.articles, [])
        self.assertEqual((beyond.total, beyond.total_pages, beyond.current_page), (25, 3, 4))

    def test_newest_publication_comes_first(self) -> None:
        older = self._publish("Older")
        newer = self._publish("Newer")

        page = self.service.list_published(page=PageRequest())

        self.assertEqual([article.id for article in page.articles], [newer, older])

    def test_publication_time_orders_not_creation_time(self) -> None:
        first_written = self._submit("Written first")
        second_written = self._submit("Written second")
        self.service.approve_article(actor=self.admin, article_id=second_written)
        self.now += timedelta(minutes=5)
        self.service.approve_article(actor=self.admin, article_id=first_written)

        page = self.service.list_published(page=PageRequest())

        self.assertEqual([article.id for article in page.articles], [first_written, second_written])

    def test_unpublished_articles_never_appear(self) -> None:
        visible = self._publish("Visible")
        self._submit("Waiting")
        rejected = self._submit("Refused")
        self.service.reject_article(actor=self.admin, article_id=rejected)
        pulled = self._publish("Pulled")
        self.service.unpublish_article(actor=self.admin, article_id=pulled)

        page = self.service.list_published(page=PageRequest(), search="")

        self.assertEqual([article.id for article in page.articles], [visible])
        self.assertEqual(page.total, 1)

    def test_search_matches_title_summary_and_tag_substrings(self) -> None:
        by_title = self._publish("Election night recap")
        by_summary = self._publish("Morning brief", summary="Polls close at ELECTION hour")
        by_tag = self._publish("Quiet story", tags=["elections2030"])
        self._publish("Unrelated", tags=["sport"])

        page = self.service.list_published(page=PageRequest(), search="  election ")

        self.assertEqual({article.id for article in page.articles}, {by_title, by_summary, by_tag})

    def test_category_filter_is_exact_and_case_insensitive(self) -> None:
        tech = self._publish("Chips", tags=["Tech"])
        self._publish("Biotech", tags=["biotech"])

        page = self.service.list_published(page=PageRequest(), category="TECH")

        self.assertEqual([article.id for article in page.articles], [tech])

    def test_public_summaries_omit_body_and_author_email(self) -> None:
        self._publish("Summary only")

        summary = self.service.list_published(page=PageRequest()).articles[0]
        dumped = summary.model_dump()

        self.assertNotIn("full_description", dumped)
        self.assertEqual(dumped["author"]["username"], "author")
        self.assertIsNone(dumped["author"]["email"])


class AdminListingUnitTests(_ClockedStoreCase):
    def test_status_filter_and_unknown_status_is_ignored(self) -> None:
        self._publish("Live")
        pending = self._submit("Queued")

        filtered = self.service.list_for_admin(page=PageRequest(), status="PENDING")
        unknown = self.service.list_for_admin(page=PageRequest(), status="archived")

        self.assertEqual([article.id for article in filtered.articles], [pending])
        self.assertEqual(unknown.total, 2)

    def test_pending_queue_lists_newest_submission_first(self) -> None:
        first = self._submit("First")
        self.store.articles[first].created_at -= timedelta(hours=1)
        second = self._submit("Second")
        self._publish("Already live")

        queue = self.service.list_pending(page=PageRequest())

        self.assertEqual([article.id for article in queue.articles], [second, first])
        self.assertTrue(all(article.status is ArticleStatus.PENDING for article in queue.articles))

    def test_equal_timestamps_list_latest_submission_first(self) -> None:
        first = self._submit("First")
        second = self._submit("Second")
        third = self._submit("Third")
        same_moment = datetime(2030, 1, 1, 8, 0, tzinfo=UTC)
        for article_id in (first, second, third):
            self.store.articles[article_id].created_at = same_moment

        queue = self.service.list_pending(page=PageRequest())

        self.assertEqual([article.id for article in queue.articles], [third, second, first])

    def test_equal_timestamps_keep_insertion_order_when_ascending(self) -> None:
        first = self._submit("First")
        second = self._submit("Second")
        same_moment = datetime(2030, 1, 1, 8, 0, tzinfo=UTC)
        for article_id in (first, second):
            self.store.articles[article_id].created_at = same_moment

        ascending = self.store.find_articles(order_by=lambda record: record.created_at, descending=False)

        self.assertEqual([record.id for record in ascending], [first, second])

    def test_owner_listing_is_scoped_to_the_author(self) -> None:
        mine = self._submit("Mine")
        rival = user_principal(self.store.create_user(username="rival", email="rival@example.com", password_hash="z"))
        self.service.create_article(actor=rival, payload=_draft("Theirs"))

        page = self.service.list_for_owner(author_id=self.author.id, page=PageRequest())

        self.assertEqual([article.id for article in page.articles], [mine])
        self.assertEqual(page.articles[0].full_description, "Body of Mine")


class ListingHelpersUnitTests(unittest.TestCase):
    def test_page_request_bounds(self) -> None:
        for page, limit in ((0, 10), (1, 0), (1, 101), (-1, 5)):
            with self.subTest(page=page, limit=limit):
                with self.assertRaises(ValueError):
                    PageRequest(page=page, limit=limit)
        self.assertEqual(PageRequest(page=3, limit=20).offset, 40)

    def test_page_info_rounds_up_and_handles_empty(self) -> None:
        self.assertEqual(page_info(0, PageRequest()).total_pages, 0)
        self.assertEqual(page_info(10, PageRequest(limit=10)).total_pages, 1)
        self.assertEqual(page_info(11, PageRequest(limit=10)).total_pages, 2)

    def test_status_filter_parsing(self) -> None:
        self.assertIs(parse_status_filter(" Published "), ArticleStatus.PUBLISHED)
        self.assertIsNone(parse_status_filter("draft"))
        self.assertIsNone(parse_status_filter(None))

    def test_blank_search_and_category_are_dropped(self) -> None:
        article_filter = ArticleFilter.public(search="   ", category="")
        self.assertIsNone(article_filter.search)
        self.assertIsNone(article_filter.category)
        self.assertIs(article_filter.status, ArticleStatus.PUBLISHED)


class ListingApiTests(_SettingsEnvCase):
    def setUp(self) -> None:
        super().setUp()
        self.app = create_app()
        self.client = TestClient(self.app)

    def test_default_page_shape_for_empty_feed(self) -> None:
        response = self.client.get("/api/users/articles")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json()["data"],
            {"articles": [], "total_pages": 0, "current_page": 1, "total": 0},
        )

    def test_out_of_range_paging_is_validation_error(self) -> None:
        for query in ("page=0", "limit=0", "limit=101", "page=abc"):
            with self.subTest(query=query):
                response = self.client.get(f"/api/users/articles?{query}")
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["error"]["code"], "VALIDATION_ERROR")

    def test_owner_listing_requires_user_token(self) -> None:
        response = self.client.get("/api/users/my-articles")

        self.assertEqual(response.status_code, 401)

    def test_public_feed_exposes_only_published_summaries(self) -> None:
        author = self.client.post(
            "/api/users/register",
            json={"username": "author", "email": "author@example.com", "password": "secret-pass"},
        ).json()["data"]["token"]
        admin = self.client.post(
            "/api/admin/register",
            json={"username": "editor", "email": "editor@example.com", "password": "secret-pass"},
        ).json()["data"]["token"]
        draft = {
            "cover_image": "https://img.example.com/c.png",
            "title": "Harbour reopens",
            "short_description": "Ships return",
            "full_description": "Long body",
            "category_tags": ["Local"],
        }
        published = self.client.post(
            "/api/users/articles", headers={"Authorization": f"Bearer {author}"}, json=draft
        ).json()["data"]
        self.client.post(
            "/api/users/articles",
            headers={"Authorization": f"Bearer {author}"},
            json={**draft, "title": "Still pending"},
        )
        self.client.put(
            f"/api/admin/articles/{published['id']}/approve",
            headers={"Authorization": f"Bearer {admin}"},
        )

        response = self.client.get("/api/users/articles", params={"category": "local", "limit": 5})

        self.assertEqual(response.status_code, 200)
        articles = response.json()["data"]["articles"]
        self.assertEqual([article["id"] for article in articles], [published["id"]])
        self.assertNotIn("full_description", articles[0])

        mine = self.client.get("/api/users/my-articles", headers={"Authorization": f"Bearer {author}"})
        self.assertEqual(mine.json()["data"]["total"], 2)
        pending_only = self.client.get(
            "/api/users/my-articles",
            headers={"Authorization": f"Bearer {author}"},
            params={"status": "pending"},
        )
        self.assertEqual([a["title"] for a in pending_only.json()["data"]["articles"]], ["Still pending"])


if __name__ == "__main__":
    unittest.main()
