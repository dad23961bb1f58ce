"""Article endpoints for staff (``/articles/``) and public clients (``/public/``)."""

import logging
from datetime import timedelta

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Count
from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny

from access_control.permissions import NewsPermission, request_identity
from access_control.policy import Permission
from core.response import BaseAPIView, BaseViewSet, EnvelopeMixin, api_response

from .models import Article, ArticleStatus, Category
from .queries import (
    PUBLIC,
    STAFF,
    ArticleListParamsSerializer,
    FeedParamsSerializer,
    build_pagination,
    build_query,
    run_query,
)
from .serializers import ArticleSerializer, ArticleSummarySerializer, ArticleWriteSerializer

logger = logging.getLogger(__name__)

TRENDING_WINDOW = timedelta(days=7)


def increment_counter(pk, field: str) -> int:
    """Bump a counter on a published article or raise 404."""
    try:
        value = Article.objects.published().increment(pk, field)
    except (TypeError, ValueError, DjangoValidationError) as exc:
        raise NotFound("Article not found.") from exc
    if value is None:
        raise NotFound("Article not found.")
    return value


def feed_limit(request) -> int:
    params = FeedParamsSerializer(data=request.query_params)
    params.is_valid(raise_exception=True)
    return params.validated_data["limit"]


def list_articles(request, identity, profile, base_queryset=None) -> dict:
    """Validate list parameters, run the query and build the list payload."""
    params = ArticleListParamsSerializer(data=request.query_params, context={"profile": profile})
    params.is_valid(raise_exception=True)
    query = build_query(identity, params.validated_data, profile)
    queryset = base_queryset if base_queryset is not None else Article.objects.all()
    items, total = run_query(query, queryset)
    serializer_class = ArticleSerializer if query.full_projection else ArticleSummarySerializer
    return {
        "items": serializer_class(items, many=True).data,
        "pagination": build_pagination(total, query.window.page, query.window.limit),
        "filters": query.applied,
    }


class ArticleViewSet(BaseViewSet):
    """Staff article management.

    Reads are open to anonymous callers, who (like authors) only ever see
    published articles. Mutations go through ``NewsPermission``.
    """

    permission_classes = [NewsPermission]
    action_permissions = {
        "list": None,
        "retrieve": None,
        "featured": None,
        "breaking": None,
        "like": None,
        "share": None,
        "metadata": None,
        "create": Permission.CREATE_NEWS,
        "update": Permission.EDIT_NEWS,
        "partial_update": Permission.EDIT_NEWS,
        "destroy": Permission.DELETE_NEWS,
    }

    def get_queryset(self):
        if self.action == "retrieve":
            identity = request_identity(self.request)
            if identity is None or not identity.is_privileged:
                return Article.objects.published()
        return Article.objects.all()

    def get_serializer_class(self):
        if self.action in ("create", "update", "partial_update"):
            return ArticleWriteSerializer
        return ArticleSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["identity"] = request_identity(self.request)
        return context

    def list(self, request, *args, **kwargs):
        return api_response(list_articles(request, request_identity(request), STAFF))

    def retrieve(self, request, *args, **kwargs):
        article = self.get_object()
        if article.status == ArticleStatus.PUBLISHED:
            article.views = increment_counter(article.pk, "views")
        return api_response(ArticleSerializer(article).data)

    def perform_create(self, serializer):
        """Snapshot the caller's profile as the article author."""
        user = request_identity(self.request).user
        article = serializer.save(**Article.author_snapshot(user))
        logger.info("Article %s created by %s", article.pk, user.email)

    def perform_update(self, serializer):
        article = serializer.save()
        logger.info(
            "Article %s updated by %s", article.pk, request_identity(self.request).email
        )

    def destroy(self, request, *args, **kwargs):
        article = self.get_object()
        article_id = article.pk
        article.delete()
        logger.info("Article %s deleted by %s", article_id, request_identity(request).email)
        return api_response({"message": "Article deleted successfully."})

    @action(detail=False, methods=["get"])
    def featured(self, request):
        limit = feed_limit(request)
        articles = Article.objects.published().filter(is_featured=True).order_by(
            "-published_at", "-id"
        )[:limit]
        return api_response(ArticleSummarySerializer(articles, many=True).data)

    @action(detail=False, methods=["get"])
    def breaking(self, request):
        limit = feed_limit(request)
        articles = Article.objects.published().filter(is_breaking=True).order_by(
            "-published_at", "-id"
        )[:limit]
        return api_response(ArticleSummarySerializer(articles, many=True).data)

    @action(detail=True, methods=["post"])
    def like(self, request, pk=None):
        return api_response({"likes": increment_counter(pk, "likes")})

    @action(detail=True, methods=["post"])
    def share(self, request, pk=None):
        return api_response({"shares": increment_counter(pk, "shares")})


class PublicNewsViewSet(EnvelopeMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Read-only feed for the website and mobile apps.

    Identity is never consulted: every query is limited to published articles.
    """

    permission_classes = [AllowAny]
    authentication_classes: list = []
    serializer_class = ArticleSerializer

    def get_queryset(self):
        return Article.objects.published()

    def list(self, request):
        return api_response(list_articles(request, None, PUBLIC))

    def retrieve(self, request, *args, **kwargs):
        article = self.get_object()
        article.views = increment_counter(article.pk, "views")
        return api_response(ArticleSerializer(article).data)

    @action(detail=False, methods=["get"])
    def breaking(self, request):
        limit = feed_limit(request)
        articles = self.get_queryset().filter(is_breaking=True).order_by("-published_at", "-id")
        return api_response(ArticleSummarySerializer(articles[:limit], many=True).data)

    @action(detail=False, methods=["get"])
    def featured(self, request):
        limit = feed_limit(request)
        articles = self.get_queryset().filter(is_featured=True).order_by("-published_at", "-id")
        return api_response(ArticleSummarySerializer(articles[:limit], many=True).data)

    @action(detail=False, methods=["get"])
    def trending(self, request):
        """Most viewed (then liked) articles published in the last seven days."""
        limit = feed_limit(request)
        since = timezone.now() - TRENDING_WINDOW
        articles = (
            self.get_queryset()
            .filter(published_at__gte=since)
            .order_by("-views", "-likes", "-id")
        )
        return api_response(ArticleSummarySerializer(articles[:limit], many=True).data)

    @action(detail=False, methods=["get"], url_path=r"category/(?P<category>[^/.]+)")
    def category(self, request, category=None):
        if category not in Category.values:
            raise NotFound("Unknown category.")
        base = self.get_queryset().filter(category=category)
        return api_response(list_articles(request, None, PUBLIC, base_queryset=base))

    @action(detail=True, methods=["post"])
    def like(self, request, pk=None):
        return api_response({"likes": increment_counter(pk, "likes")})


class CategoryListView(BaseAPIView):
    """Every category with the number of published articles in it."""

    permission_classes = [AllowAny]
    authentication_classes: list = []

    def get(self, request):
        counts = dict(
            Article.objects.published()
            .order_by()
            .values_list("category")
            .annotate(total=Count("id"))
        )
        data = [
            {"value": value, "label": label, "count": counts.get(value, 0)}
            for value, label in Category.choices
        ]
        return api_response(data)


class PublicSearchView(BaseAPIView):
    """Search published articles by ``q``, ``category`` and ``tags``."""

    permission_classes = [AllowAny]
    authentication_classes: list = []

    def get(self, request):
        return api_response(list_articles(request, None, PUBLIC), status=status.HTTP_200_OK)


__all__ = ["ArticleViewSet", "CategoryListView", "PublicNewsViewSet", "PublicSearchView"]
