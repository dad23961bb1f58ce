"""Shared helpers for tests (user/article factories, fake Redis, auth clients)."""

from __future__ import annotations

from typing import Dict
from unittest import mock

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from access_control.policy import Role
from articles.models import Article
from authentication.services import TokenService

User = get_user_model()

DEFAULT_PASSWORD = "StrongPass123"


class FakeRedis:
    """Minimal Redis stub supporting the commands used by the project."""

    def __init__(self):
        self._store: Dict[str, str] = {}

    def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        """Mimic Redis SETEX; TTL is ignored in tests, value stored in-memory."""
        self._store[key] = value

    def get(self, key: str):
        """Return stored value for key or None, matching Redis GET semantics."""
        return self._store.get(key)

    def ping(self) -> bool:
        return True


class FakeRedisMixin:
    """Patch both Redis lookups with one in-memory fake for a whole TestCase."""

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.fake_redis = FakeRedis()
        cls.patchers = [
            mock.patch("core.redis_client.get_redis_client", return_value=cls.fake_redis),
            mock.patch("authentication.services.get_redis_client", return_value=cls.fake_redis),
        ]
        for patcher in cls.patchers:
            patcher.start()

    @classmethod
    def tearDownClass(cls):
        for patcher in cls.patchers:
            patcher.stop()
        super().tearDownClass()


def create_user(username: str, role: str = Role.AUTHOR, password: str = DEFAULT_PASSWORD, **extra):
    """Create a staff user with a bcrypt-hashed password for tests."""

    extra.setdefault("full_name", username.title())
    email = extra.pop("email", f"{username}@example.com")
    return User.objects.create_user(username, email, password, role=role, **extra)


def create_article(author, **fields) -> Article:
    """Create an article authored by ``author`` (draft unless told otherwise)."""

    fields.setdefault("title", "Untitled")
    fields.setdefault("summary", "Summary")
    fields.setdefault("content", "Some article content.")
    article = Article(**fields, **Article.author_snapshot(author))
    article.save()
    return article


def auth_client(user) -> APIClient:
    """Return an APIClient authenticated with a fresh bearer token."""

    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {TokenService.issue_token(user)}")
    return client
