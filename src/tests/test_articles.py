"""API tests for the staff article endpoints."""

from __future__ import annotations

from django.test import TestCase
from rest_framework.test import APIClient

from access_control.policy import Role
from articles.models import Article, ArticleStatus
from tests.utils import FakeRedisMixin, auth_client, create_article, create_user

ARTICLES_URL = "/articles/"


def detail_url(article) -> str:
    return f"{ARTICLES_URL}{article.pk}/"


class ArticleListTests(FakeRedisMixin, TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.editor = create_user("editor", Role.EDITOR)
        cls.author = create_user("author", Role.AUTHOR)
        for index in range(3):
            create_article(cls.editor, title=f"Live {index}", status=ArticleStatus.PUBLISHED)
        create_article(cls.author, title="Work in progress")
        create_article(cls.editor, title="Old story", status=ArticleStatus.ARCHIVED)

    def test_anonymous_status_filter_is_ignored(self):
        response = APIClient().get(ARTICLES_URL, {"status": "draft"})

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["errors"], [])
        items = payload["data"]["items"]
        self.assertEqual(len(items), 3)
        self.assertTrue(all(item["status"] == "published" for item in items))
        self.assertEqual(payload["data"]["filters"]["status"], "published")
        self.assertNotIn("content", items[0])

    def test_author_also_sees_published_only(self):
        response = auth_client(self.author).get(ARTICLES_URL, {"status": "draft"})
        self.assertEqual(response.json()["data"]["pagination"]["totalItems"], 3)

    def test_editor_can_filter_drafts_and_gets_content(self):
        response = auth_client(self.editor).get(ARTICLES_URL, {"status": "draft"})

        items = response.json()["data"]["items"]
        self.assertEqual([item["title"] for item in items], ["Work in progress"])
        self.assertIn("content", items[0])

    def test_pagination_metadata(self):
        response = APIClient().get(ARTICLES_URL, {"page": 2, "limit": 2})

        pagination = response.json()["data"]["pagination"]
        self.assertEqual(
            pagination,
            {
                "currentPage": 2,
                "totalPages": 2,
                "totalItems": 3,
                "itemsPerPage": 2,
                "hasNext": False,
                "hasPrev": True,
            },
        )
        self.assertEqual(len(response.json()["data"]["items"]), 1)

    def test_invalid_parameters_are_validation_errors(self):
        for params in ({"sort": "random"}, {"limit": 101}, {"page": 0}, {"category": "sports"}):
            response = APIClient().get(ARTICLES_URL, params)
            self.assertEqual(response.status_code, 400, params)
            self.assertEqual(response.json()["code"], "validation_error")
            self.assertIsNone(response.json()["data"])

    def test_options_is_public_like_get(self):
        response = APIClient().options(ARTICLES_URL)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["errors"], [])

    def test_featured_and_breaking_feeds(self):
        flagged = create_article(
            self.editor, title="Zero-day", status=ArticleStatus.PUBLISHED, is_breaking=True
        )
        create_article(self.editor, title="Unpublished scoop", is_breaking=True, is_featured=True)

        breaking = APIClient().get(f"{ARTICLES_URL}breaking/").json()["data"]
        featured = APIClient().get(f"{ARTICLES_URL}featured/").json()["data"]

        self.assertEqual([item["id"] for item in breaking], [str(flagged.pk)])
        self.assertEqual(featured, [])


class ArticleCreateTests(FakeRedisMixin, TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = create_user("admin", Role.ADMIN)
        cls.editor = create_user("editor", Role.EDITOR)
        cls.author = create_user("author", Role.AUTHOR, full_name="Ada Writer")

    payload = {
        "title": "  New ransomware strain  ",
        "summary": "A short summary.",
        "content": "Researchers found a new strain.",
        "category": "malware",
        "tags": ["Ransomware", " CVE "],
    }

    def test_author_creates_draft_with_author_snapshot(self):
        response = auth_client(self.author).post(ARTICLES_URL, self.payload, format="json")

        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual(data["title"], "New ransomware strain")
        self.assertEqual(data["status"], "draft")
        self.assertEqual(data["tags"], ["ransomware", "cve"])
        self.assertEqual(
            data["author"], {"name": "Ada Writer", "email": "author@example.com", "avatar": ""}
        )
        self.assertEqual(data["views"], 0)

    def test_client_supplied_author_and_counters_are_ignored(self):
        payload = dict(self.payload, views=500, author_email="someone@else.com")
        response = auth_client(self.author).post(ARTICLES_URL, payload, format="json")

        article = Article.objects.get(pk=response.json()["data"]["id"])
        self.assertEqual(article.views, 0)
        self.assertEqual(article.author_email, "author@example.com")

    def test_anonymous_create_is_unauthenticated(self):
        response = APIClient().post(ARTICLES_URL, self.payload, format="json")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "unauthenticated")

    def test_author_cannot_create_published(self):
        payload = dict(self.payload, status="published")
        response = auth_client(self.author).post(ARTICLES_URL, payload, format="json")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["code"], "permission_forbidden")
        self.assertFalse(Article.objects.exists())

    def test_editor_publishes_on_create(self):
        payload = dict(self.payload, status="published")
        response = auth_client(self.editor).post(ARTICLES_URL, payload, format="json")

        self.assertEqual(response.status_code, 201)
        self.assertIsNotNone(response.json()["data"]["published_at"])

    def test_editorial_flags_are_admin_only(self):
        payload = dict(self.payload, is_featured=True, is_breaking=True)

        editor_response = auth_client(self.editor).post(ARTICLES_URL, payload, format="json")
        admin_response = auth_client(self.admin).post(ARTICLES_URL, payload, format="json")

        self.assertFalse(editor_response.json()["data"]["is_featured"])
        self.assertFalse(editor_response.json()["data"]["is_breaking"])
        self.assertTrue(admin_response.json()["data"]["is_featured"])
        self.assertTrue(admin_response.json()["data"]["is_breaking"])

    def test_form_encoded_create_keeps_repeated_tags(self):
        payload = {
            "title": "Form upload",
            "summary": "Sent as multipart.",
            "content": "Body text.",
            "tags": ["alpha", "beta"],
            "is_featured": "true",
        }

        for user in (self.author, self.admin):
            response = auth_client(user).post(ARTICLES_URL, payload, format="multipart")
            self.assertEqual(response.status_code, 201, user.username)
            self.assertEqual(response.json()["data"]["tags"], ["alpha", "beta"])

        self.assertFalse(Article.objects.get(author_email="author@example.com").is_featured)
        self.assertTrue(Article.objects.get(author_email="admin@example.com").is_featured)

    def test_missing_title_is_validation_error(self):
        payload = {key: value for key, value in self.payload.items() if key != "title"}
        response = auth_client(self.author).post(ARTICLES_URL, payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "validation_error")


class ArticleUpdateTests(FakeRedisMixin, TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.editor = create_user("editor", Role.EDITOR)
        cls.author = create_user("author", Role.AUTHOR)
        cls.other_author = create_user("other", Role.AUTHOR)

    def setUp(self):
        self.draft = create_article(self.author, title="Draft")

    def test_author_edits_own_draft(self):
        response = auth_client(self.author).patch(
            detail_url(self.draft), {"title": "Better title"}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Article.objects.get(pk=self.draft.pk).title, "Better title")

    def test_author_cannot_edit_someone_elses_article(self):
        response = auth_client(self.other_author).patch(
            detail_url(self.draft), {"title": "Hijacked"}, format="json"
        )

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["code"], "ownership_forbidden")
        self.assertEqual(Article.objects.get(pk=self.draft.pk).title, "Draft")

    def test_draft_to_published_workflow(self):
        anonymous = APIClient()
        self.assertEqual(anonymous.get(ARTICLES_URL).json()["data"]["items"], [])

        author_attempt = auth_client(self.author).patch(
            detail_url(self.draft), {"status": "published"}, format="json"
        )
        self.assertEqual(author_attempt.status_code, 403)
        self.assertEqual(author_attempt.json()["code"], "permission_forbidden")
        self.assertEqual(Article.objects.get(pk=self.draft.pk).status, "draft")

        editor_response = auth_client(self.editor).patch(
            detail_url(self.draft), {"status": "published"}, format="json"
        )
        self.assertEqual(editor_response.status_code, 200)
        self.assertIsNotNone(editor_response.json()["data"]["published_at"])

        items = anonymous.get(ARTICLES_URL).json()["data"]["items"]
        self.assertEqual([item["id"] for item in items], [str(self.draft.pk)])

    def test_author_may_unpublish_own_article(self):
        article = create_article(self.author, status=ArticleStatus.PUBLISHED)
        response = auth_client(self.author).patch(
            detail_url(article), {"status": "draft"}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(Article.objects.get(pk=article.pk).published_at)

    def test_update_keeps_author_snapshot(self):
        auth_client(self.editor).patch(detail_url(self.draft), {"summary": "Edited"}, format="json")

        article = Article.objects.get(pk=self.draft.pk)
        self.assertEqual(article.author_email, "author@example.com")
        self.assertEqual(article.summary, "Edited")

    def test_full_update_requires_all_fields(self):
        response = auth_client(self.author).put(
            detail_url(self.draft), {"title": "Only a title"}, format="json"
        )
        self.assertEqual(response.status_code, 400)


class ArticleDeleteTests(FakeRedisMixin, TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.editor = create_user("editor", Role.EDITOR)
        cls.author = create_user("author", Role.AUTHOR)

    def test_author_deletes_own_draft(self):
        draft = create_article(self.author)
        response = auth_client(self.author).delete(detail_url(draft))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"], {"message": "Article deleted successfully."})
        self.assertFalse(Article.objects.filter(pk=draft.pk).exists())

    def test_author_cannot_delete_own_published_article(self):
        article = create_article(self.author, status=ArticleStatus.PUBLISHED)
        response = auth_client(self.author).delete(detail_url(article))

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["code"], "ownership_forbidden")
        self.assertTrue(Article.objects.filter(pk=article.pk).exists())

    def test_editor_deletes_any_article(self):
        article = create_article(self.author, status=ArticleStatus.PUBLISHED)
        response = auth_client(self.editor).delete(detail_url(article))
        self.assertEqual(response.status_code, 200)


class ArticleReadAndEngagementTests(FakeRedisMixin, TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.editor = create_user("editor", Role.EDITOR)
        cls.published = create_article(cls.editor, status=ArticleStatus.PUBLISHED)
        cls.draft = create_article(cls.editor, title="Embargoed")

    def test_retrieve_increments_views(self):
        client = APIClient()
        first = client.get(detail_url(self.published))
        second = client.get(detail_url(self.published))

        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.json()["data"]["views"], 1)
        self.assertEqual(second.json()["data"]["views"], 2)
        self.assertIn("content", first.json()["data"])

    def test_draft_is_hidden_from_anonymous_callers(self):
        response = APIClient().get(detail_url(self.draft))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["code"], "not_found")

    def test_editor_reads_draft_without_counting_a_view(self):
        response = auth_client(self.editor).get(detail_url(self.draft))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Article.objects.get(pk=self.draft.pk).views, 0)

    def test_malformed_and_unknown_ids_are_not_found(self):
        for url in (f"{ARTICLES_URL}not-a-uuid/", f"{ARTICLES_URL}00000000-0000-0000-0000-000000000000/"):
            response = APIClient().get(url)
            self.assertEqual(response.status_code, 404, url)
            self.assertEqual(response.json()["code"], "not_found")

    def test_like_and_share(self):
        client = APIClient()
        self.assertEqual(client.post(f"{detail_url(self.published)}like/").json()["data"], {"likes": 1})
        self.assertEqual(client.post(f"{detail_url(self.published)}like/").json()["data"], {"likes": 2})
        self.assertEqual(client.post(f"{detail_url(self.published)}share/").json()["data"], {"shares": 1})

    def test_like_on_draft_or_bad_id_is_not_found(self):
        self.assertEqual(APIClient().post(f"{detail_url(self.draft)}like/").status_code, 404)
        self.assertEqual(APIClient().post(f"{ARTICLES_URL}nope/like/").status_code, 404)
        self.assertEqual(Article.objects.get(pk=self.draft.pk).likes, 0)
