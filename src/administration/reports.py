"""Aggregations behind the admin dashboard and news analytics."""

from datetime import datetime, timedelta
from typing import Any, Optional

from django.contrib.auth import get_user_model
from django.db.models import Avg, Count, Q, Sum
from django.db.models.functions import TruncDate

from articles.models import Article, ArticleStatus
from authentication.models import UserStatus

User = get_user_model()

ANALYTICS_PERIODS = {
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
    "1y": timedelta(days=365),
}
DEFAULT_PERIOD = "30d"
TREND_WINDOW = timedelta(days=30)


def dashboard_stats(now: datetime) -> dict[str, Any]:
    """Article, user and engagement totals plus the last month's trend."""
    since = now - TREND_WINDOW
    published = Q(status=ArticleStatus.PUBLISHED)

    news = Article.objects.aggregate(
        total=Count("id"),
        published=Count("id", filter=published),
        draft=Count("id", filter=Q(status=ArticleStatus.DRAFT)),
        archived=Count("id", filter=Q(status=ArticleStatus.ARCHIVED)),
        new_this_month=Count("id", filter=published & Q(created_at__gte=since)),
        total_views=Sum("views", default=0),
        total_likes=Sum("likes", default=0),
        views_this_month=Sum("views", filter=published & Q(published_at__gte=since), default=0),
    )
    users = User.objects.aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(status=UserStatus.ACTIVE)),
        new_this_month=Count("id", filter=Q(created_at__gte=since)),
    )

    recent = (
        Article.objects.published()
        .order_by("-published_at", "-id")
        .values("id", "title", "published_at", "views", "likes", "author_name")[:5]
    )
    top_categories = (
        Article.objects.published()
        .order_by()
        .values("category")
        .annotate(count=Count("id"), total_views=Sum("views", default=0))
        .order_by("-count", "category")[:10]
    )

    return {
        "stats": {
            "news": {
                "total": news["total"],
                "published": news["published"],
                "draft": news["draft"],
                "archived": news["archived"],
                "new_this_month": news["new_this_month"],
            },
            "users": users,
            "engagement": {
                "total_views": news["total_views"],
                "total_likes": news["total_likes"],
                "views_this_month": news["views_this_month"],
            },
        },
        "recent_news": list(recent),
        "top_categories": list(top_categories),
        "trends": {
            "new_news": news["new_this_month"],
            "new_users": users["new_this_month"],
            "views": news["views_this_month"],
        },
    }


def news_analytics(period: str, category: Optional[str], now: datetime) -> dict[str, Any]:
    """Per-day, per-article, per-category and per-author figures for a period.

    Only articles published inside the period are counted.
    """
    start = now - ANALYTICS_PERIODS[period]
    scope = Article.objects.published().filter(published_at__gte=start, published_at__lte=now)
    if category:
        scope = scope.filter(category=category)
    scope = scope.order_by()

    views_by_day = (
        scope.annotate(day=TruncDate("published_at"))
        .values("day")
        .annotate(views=Sum("views"), likes=Sum("likes"), articles=Count("id"))
        .order_by("day")
    )
    top_articles = scope.order_by("-views", "-id").values(
        "id", "title", "views", "likes", "shares", "published_at", "author_name", "category"
    )[:10]
    category_stats = (
        scope.values("category")
        .annotate(
            articles=Count("id"),
            total_views=Sum("views"),
            total_likes=Sum("likes"),
            avg_views=Avg("views"),
        )
        .order_by("-total_views", "category")
    )
    author_stats = (
        scope.values("author_email")
        .annotate(
            articles=Count("id"),
            total_views=Sum("views"),
            total_likes=Sum("likes"),
            avg_views=Avg("views"),
        )
        .order_by("-total_views", "author_email")[:10]
    )

    return {
        "period": period,
        "date_range": {"start": start, "end": now},
        "analytics": {
            "views_by_day": list(views_by_day),
            "top_articles": list(top_articles),
            "category_stats": list(category_stats),
            "author_stats": list(author_stats),
        },
    }


__all__ = ["ANALYTICS_PERIODS", "DEFAULT_PERIOD", "dashboard_stats", "news_analytics"]
