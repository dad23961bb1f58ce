"""Query parameter validation for the admin endpoints."""

from rest_framework import serializers

from access_control.policy import Role
from articles.models import Category
from authentication.models import UserStatus

from .reports import ANALYTICS_PERIODS, DEFAULT_PERIOD


class UserListParamsSerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=20)
    role = serializers.ChoiceField(choices=Role.choices, required=False)
    status = serializers.ChoiceField(choices=UserStatus.choices, required=False)
    search = serializers.CharField(required=False, min_length=1, max_length=100)


class AnalyticsParamsSerializer(serializers.Serializer):
    period = serializers.ChoiceField(choices=list(ANALYTICS_PERIODS), default=DEFAULT_PERIOD)
    category = serializers.ChoiceField(choices=Category.choices, required=False)


__all__ = ["AnalyticsParamsSerializer", "UserListParamsSerializer"]
