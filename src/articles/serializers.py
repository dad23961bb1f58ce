"""Serializers for articles.

Read serializers expose the author snapshot as a nested ``author`` object.
The write serializer keeps counters, author and timestamps read-only and
drops the editorial flags unless the caller is an admin.
"""

from django.http import QueryDict
from rest_framework import serializers

from access_control.policy import authorize_transition

from .models import Article

AUTHOR_FIELDS = ["author_name", "author_email", "author_avatar"]
ADMIN_ONLY_FIELDS = ("is_breaking", "is_featured")


class AuthorSnapshotField(serializers.Field):
    """Render the denormalized author columns as one object."""

    def __init__(self, **kwargs):
        kwargs["source"] = "*"
        kwargs["read_only"] = True
        super().__init__(**kwargs)

    def to_representation(self, value):
        return value.author


class ArticleSummarySerializer(serializers.ModelSerializer):
    """List projection without the article body."""

    author = AuthorSnapshotField()

    class Meta:
        model = Article
        fields = [
            "id",
            "title",
            "summary",
            "category",
            "tags",
            "image_url",
            "author",
            "status",
            "priority",
            "published_at",
            "views",
            "likes",
            "shares",
            "reading_time",
            "is_breaking",
            "is_featured",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ArticleSerializer(ArticleSummarySerializer):
    class Meta(ArticleSummarySerializer.Meta):
        fields = ArticleSummarySerializer.Meta.fields + [
            "content",
            "meta_title",
            "meta_description",
            "keywords",
        ]
        read_only_fields = fields


class ArticleWriteSerializer(serializers.ModelSerializer):
    """Create and update articles.

    Expects the resolved ``identity`` in the serializer context.
    """

    author = AuthorSnapshotField()
    tags = serializers.ListField(
        child=serializers.CharField(max_length=50), required=False, allow_empty=True
    )
    keywords = serializers.ListField(
        child=serializers.CharField(max_length=50), required=False, allow_empty=True
    )

    class Meta:
        model = Article
        fields = ArticleSerializer.Meta.fields
        read_only_fields = [
            "id",
            "author",
            "views",
            "likes",
            "shares",
            "reading_time",
            "created_at",
            "updated_at",
        ]

    def to_internal_value(self, data):
        identity = self.context.get("identity")
        if identity is None or not identity.is_admin:
            # QueryDict.copy() keeps every value of repeated form keys.
            data = data.copy() if isinstance(data, QueryDict) else dict(data)
            for name in ADMIN_ONLY_FIELDS:
                data.pop(name, None)
        return super().to_internal_value(data)

    def validate_title(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("This field may not be blank.")
        return value

    def validate_tags(self, value: list[str]) -> list[str]:
        return [tag.strip().lower() for tag in value if tag.strip()]

    def validate(self, attrs):
        identity = self.context.get("identity")
        new_status = attrs.get("status")
        if identity is not None and new_status is not None:
            current = self.instance.status if self.instance is not None else None
            authorize_transition(identity, current, new_status)
        return attrs


__all__ = [
    "ArticleSerializer",
    "ArticleSummarySerializer",
    "ArticleWriteSerializer",
]
