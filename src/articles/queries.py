"""Translate list parameters into an article query.

``ArticleListParamsSerializer`` validates the raw query string, then
``build_query`` turns the validated values plus the caller's identity into an
``ArticleQuery`` (filters, ordering, page window, projection). The visibility
rule is applied before any caller-supplied filter: anyone who is not admin or
editor only ever sees published articles, whatever ``status`` they ask for.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any, Optional

from django.db.models import F, Q
from rest_framework import serializers

from access_control.policy import Identity

from .models import ArticleStatus, Category

SORT_ORDERINGS: dict[str, tuple[Any, ...]] = {
    "newest": (F("published_at").desc(nulls_last=True), F("created_at").desc()),
    "oldest": (F("published_at").asc(nulls_first=True), F("created_at").asc()),
    "views": (F("views").desc(),),
    "likes": (F("likes").desc(),),
    "title": (F("title").asc(),),
    "popular": (F("views").desc(), F("likes").desc()),
    "trending": (F("likes").desc(), F("views").desc(), F("published_at").desc(nulls_last=True)),
}

# Ties are broken by id so consecutive pages never overlap.
TIEBREAKER = "-id"


@dataclass(frozen=True)
class QueryProfile:
    """Limits and sort keys for one family of list endpoints."""

    name: str
    sort_keys: tuple[str, ...]
    max_limit: int
    default_limit: int = 20
    default_sort: str = "newest"
    published_only: bool = False


STAFF = QueryProfile("staff", ("newest", "oldest", "views", "likes", "title"), max_limit=100)
PUBLIC = QueryProfile(
    "public", ("newest", "oldest", "popular", "trending"), max_limit=50, published_only=True
)


class ArticleListParamsSerializer(serializers.Serializer):
    """Validate list query parameters against a ``QueryProfile``.

    The profile is passed through the serializer context and defaults to
    ``STAFF``.
    """

    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1)
    category = serializers.ChoiceField(choices=Category.choices, required=False)
    status = serializers.ChoiceField(choices=ArticleStatus.choices, required=False)
    search = serializers.CharField(required=False, allow_blank=True, max_length=200)
    q = serializers.CharField(required=False, allow_blank=True, max_length=200)
    author = serializers.CharField(required=False, max_length=254)
    sort = serializers.CharField(required=False)
    tags = serializers.CharField(required=False, allow_blank=True)

    @property
    def profile(self) -> QueryProfile:
        return self.context.get("profile", STAFF)

    def validate_limit(self, value: int) -> int:
        if value > self.profile.max_limit:
            raise serializers.ValidationError(
                f"Ensure this value is less than or equal to {self.profile.max_limit}."
            )
        return value

    def validate_author(self, value: str) -> str:
        value = value.strip().lower()
        if "@" not in value:
            raise serializers.ValidationError("Author filter must be an email address.")
        return value

    def validate_sort(self, value: str) -> str:
        if value not in self.profile.sort_keys:
            allowed = ", ".join(self.profile.sort_keys)
            raise serializers.ValidationError(f"Invalid sort key. Allowed: {allowed}.")
        return value

    def validate_tags(self, value: str) -> list[str]:
        return [tag.strip().lower() for tag in value.split(",") if tag.strip()]

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        # Mobile clients send the search term as ``q``.
        q = attrs.pop("q", "")
        search = (attrs.get("search") or q or "").strip()
        if search:
            attrs["search"] = search
        else:
            attrs.pop("search", None)
        attrs.setdefault("limit", self.profile.default_limit)
        attrs.setdefault("sort", self.profile.default_sort)
        return attrs


class FeedParamsSerializer(serializers.Serializer):
    """``limit`` for the short featured/breaking/trending feeds."""

    limit = serializers.IntegerField(required=False, min_value=1, max_value=50, default=10)


@dataclass(frozen=True)
class PageWindow:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class ArticleQuery:
    filters: Q
    ordering: tuple[Any, ...]
    window: PageWindow
    full_projection: bool
    applied: dict[str, Any] = field(default_factory=dict)


def _tag_lookup(tag: str) -> Q:
    # Tags are stored as a JSON list, so match the quoted element text. The
    # ASCII-escaped form covers backends that store JSON with escapes.
    return Q(tags__icontains=json.dumps(tag, ensure_ascii=False)) | Q(
        tags__icontains=json.dumps(tag)
    )


def build_query(
    identity: Optional[Identity], params: dict[str, Any], profile: QueryProfile = STAFF
) -> ArticleQuery:
    """Build filters, ordering, window and projection for a list request.

    ``params`` is the validated output of ``ArticleListParamsSerializer``.
    """
    privileged = identity is not None and identity.is_privileged and not profile.published_only
    applied: dict[str, Any] = {}

    if privileged:
        filters = Q()
        if params.get("status"):
            filters &= Q(status=params["status"])
            applied["status"] = params["status"]
    else:
        # Requested status is ignored rather than rejected.
        filters = Q(status=ArticleStatus.PUBLISHED)
        applied["status"] = ArticleStatus.PUBLISHED.value

    if params.get("category"):
        filters &= Q(category=params["category"])
        applied["category"] = params["category"]

    if params.get("author"):
        filters &= Q(author_email__iexact=params["author"])
        applied["author"] = params["author"]

    if params.get("search"):
        term = params["search"]
        filters &= (
            Q(title__icontains=term)
            | Q(summary__icontains=term)
            | Q(content__icontains=term)
            | Q(tags__icontains=term)
        )
        applied["search"] = term

    tags = params.get("tags") or []
    if tags:
        any_tag = Q()
        for tag in tags:
            any_tag |= _tag_lookup(tag)
        filters &= any_tag
        applied["tags"] = tags

    sort = params.get("sort") or profile.default_sort
    applied["sort"] = sort

    window = PageWindow(
        page=params.get("page") or 1, limit=params.get("limit") or profile.default_limit
    )
    return ArticleQuery(
        filters=filters,
        ordering=SORT_ORDERINGS[sort] + (TIEBREAKER,),
        window=window,
        full_projection=privileged,
        applied=applied,
    )


def run_query(query: ArticleQuery, queryset) -> tuple[list, int]:
    """Return ``(items, total)`` for one page of ``query``."""
    queryset = queryset.filter(query.filters).order_by(*query.ordering)
    if not query.full_projection:
        queryset = queryset.defer("content")
    total = queryset.count()
    start = query.window.offset
    items = list(queryset[start:start + query.window.limit])
    return items, total


def build_pagination(total: int, page: int, limit: int) -> dict[str, Any]:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        "totalItems": total,
        "itemsPerPage": limit,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


__all__ = [
    "ArticleListParamsSerializer",
    "ArticleQuery",
    "FeedParamsSerializer",
    "PUBLIC",
    "PageWindow",
    "QueryProfile",
    "SORT_ORDERINGS",
    "STAFF",
    "build_pagination",
    "build_query",
    "run_query",
]
