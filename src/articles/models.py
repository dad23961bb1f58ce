"""News article model with an embedded author snapshot and atomic counters."""

import logging
import uuid

from django.db import models, transaction
from django.db.models import F
from django.utils import timezone

from . import lifecycle

logger = logging.getLogger(__name__)


class Category(models.TextChoices):
    CYBERSECURITY = "cybersecurity", "Cybersecurity"
    MALWARE = "malware", "Malware"
    DATA_BREACH = "data-breach", "Data breach"
    PRIVACY = "privacy", "Privacy"
    TRENDS = "trends", "Trends"
    TIPS = "tips", "Security tips"
    ALERTS = "alerts", "Alerts"
    GENERAL = "general", "General"


class ArticleStatus(models.TextChoices):
    DRAFT = lifecycle.DRAFT, "Draft"
    PUBLISHED = lifecycle.PUBLISHED, "Published"
    ARCHIVED = lifecycle.ARCHIVED, "Archived"


class Priority(models.TextChoices):
    LOW = "low", "Low"
    NORMAL = "normal", "Normal"
    HIGH = "high", "High"
    URGENT = "urgent", "Urgent"


COUNTER_FIELDS = ("views", "likes", "shares")


class ArticleQuerySet(models.QuerySet):
    def published(self):
        return self.filter(status=ArticleStatus.PUBLISHED)

    def authored_by(self, email: str):
        return self.filter(author_email__iexact=email)

    def increment(self, pk, field: str, amount: int = 1) -> int | None:
        """Atomically add ``amount`` to a counter and return the stored value.

        The addition happens in a single UPDATE so concurrent increments are
        never lost. Returns ``None`` when no row in this queryset matches.
        """
        if field not in COUNTER_FIELDS:
            raise ValueError(f"{field} is not a counter")
        with transaction.atomic():
            updated = self.filter(pk=pk).update(**{field: F(field) + amount})
            if not updated:
                return None
            return self.model.objects.filter(pk=pk).values_list(field, flat=True).get()


class Article(models.Model):
    """Security news article.

    The author fields are a copy of the creator's profile taken at creation
    time and are never synchronised with the user record.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    summary = models.CharField(max_length=500)
    content = models.TextField()
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.GENERAL)
    tags = models.JSONField(default=list, blank=True)
    image_url = models.URLField(blank=True)

    author_name = models.CharField(max_length=100)
    author_email = models.EmailField()
    author_avatar = models.URLField(blank=True)

    status = models.CharField(max_length=10, choices=ArticleStatus.choices, default=ArticleStatus.DRAFT)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.NORMAL)
    published_at = models.DateTimeField(null=True, blank=True)

    views = models.PositiveIntegerField(default=0)
    likes = models.PositiveIntegerField(default=0)
    shares = models.PositiveIntegerField(default=0)
    reading_time = models.PositiveIntegerField(default=1)

    meta_title = models.CharField(max_length=60, blank=True)
    meta_description = models.CharField(max_length=160, blank=True)
    keywords = models.JSONField(default=list, blank=True)

    is_breaking = models.BooleanField(default=False)
    is_featured = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ArticleQuerySet.as_manager()

    class Meta:
        ordering = ["-published_at", "-created_at"]
        indexes = [
            models.Index(fields=["status", "-published_at"], name="article_status_pub_idx"),
            models.Index(fields=["category", "status"], name="article_category_status_idx"),
            models.Index(fields=["author_email"], name="article_author_email_idx"),
            models.Index(fields=["is_breaking", "is_featured"], name="article_flags_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._remember_loaded_state()
        return instance

    def _remember_loaded_state(self) -> None:
        # Deferred fields are absent from __dict__ and stay None here.
        self._loaded_status = self.__dict__.get("status")
        self._loaded_content = self.__dict__.get("content")

    @property
    def author(self) -> dict:
        return {"name": self.author_name, "email": self.author_email, "avatar": self.author_avatar}

    @staticmethod
    def author_snapshot(user) -> dict:
        """Author columns copied from the creator's current profile."""
        return {
            "author_name": user.full_name or user.username,
            "author_email": user.email,
            "author_avatar": getattr(user, "avatar", "") or "",
        }

    def save(self, *args, **kwargs):
        adding = self._state.adding
        previous_status = None if adding else getattr(self, "_loaded_status", None)
        previous_content = None if adding else getattr(self, "_loaded_content", None)

        self.tags = [tag.strip().lower() for tag in self.tags or [] if tag and tag.strip()]
        self.author_email = (self.author_email or "").strip().lower()
        lifecycle.apply(self, previous_content, timezone.now())

        update_fields = kwargs.get("update_fields")
        if not adding and update_fields is None:
            # Counters only move through ``ArticleQuerySet.increment``; a stale
            # instance must not write old values back.
            kwargs["update_fields"] = [
                f.name
                for f in self._meta.concrete_fields
                if not f.primary_key and f.name not in COUNTER_FIELDS
            ]
        elif update_fields is not None:
            extra = set()
            if "status" in update_fields:
                extra.add("published_at")
            if "content" in update_fields:
                extra.add("reading_time")
            kwargs["update_fields"] = {*update_fields, *extra}

        super().save(*args, **kwargs)

        if lifecycle.status_changed(previous_status, self.status):
            logger.info(
                "Article %s status %s -> %s", self.pk, previous_status or "new", self.status
            )
        self._remember_loaded_state()


__all__ = ["Article", "ArticleQuerySet", "ArticleStatus", "Category", "COUNTER_FIELDS", "Priority"]
