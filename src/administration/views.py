"""Admin endpoints: dashboard statistics, news analytics and user management."""

import logging

from django.contrib.auth import get_user_model
from django.db.models import Q
from django.utils import timezone
from rest_framework import viewsets

from access_control.permissions import HasPermission, IsIdentified, request_identity
from access_control.policy import (
    Permission,
    Role,
    guard_self_target,
    require_permission,
    require_role,
)
from articles.models import Article
from articles.queries import build_pagination
from authentication.serializers import AdminUserUpdateSerializer, UserDetailSerializer
from core.exceptions import InvalidAction
from core.response import BaseAPIView, EnvelopeMixin, api_response

from .reports import dashboard_stats, news_analytics
from .serializers import AnalyticsParamsSerializer, UserListParamsSerializer

User = get_user_model()
logger = logging.getLogger(__name__)


class AdminStatsView(BaseAPIView):
    permission_classes = [HasPermission]
    required_permission = Permission.VIEW_ANALYTICS

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        return api_response(dashboard_stats(timezone.now()))


class NewsAnalyticsView(BaseAPIView):
    permission_classes = [HasPermission]
    required_permission = Permission.VIEW_ANALYTICS

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        params = AnalyticsParamsSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        data = params.validated_data
        return api_response(news_analytics(data["period"], data.get("category"), timezone.now()))


class UserAdminViewSet(EnvelopeMixin, viewsets.GenericViewSet):
    """List, update and delete staff accounts.

    Update and delete refuse to act on the caller's own account before any
    role or permission check runs.
    """

    permission_classes = [IsIdentified]
    queryset = User.objects.all()
    serializer_class = UserDetailSerializer

    def list(self, request):
        require_permission(request_identity(request), Permission.MANAGE_USERS)
        params = UserListParamsSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        filters = params.validated_data

        users = User.objects.order_by("-created_at", "-id")
        if filters.get("role"):
            users = users.filter(role=filters["role"])
        if filters.get("status"):
            users = users.filter(status=filters["status"])
        if filters.get("search"):
            term = filters["search"]
            users = users.filter(
                Q(username__icontains=term) | Q(email__icontains=term) | Q(full_name__icontains=term)
            )

        page, limit = filters["page"], filters["limit"]
        total = users.count()
        start = (page - 1) * limit
        return api_response(
            {
                "items": UserDetailSerializer(users[start:start + limit], many=True).data,
                "pagination": build_pagination(total, page, limit),
            }
        )

    def update(self, request, pk=None):
        identity = guard_self_target(request_identity(request), pk)
        require_permission(identity, Permission.MANAGE_USERS)
        user = self.get_object()
        serializer = AdminUserUpdateSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info(
            "User %s updated by %s: %s", user.email, identity.email, sorted(serializer.validated_data)
        )
        return api_response(UserDetailSerializer(user).data)

    def destroy(self, request, pk=None):
        identity = guard_self_target(request_identity(request), pk)
        require_role(identity, [Role.ADMIN])
        user = self.get_object()
        authored = Article.objects.authored_by(user.email).count()
        if authored:
            raise InvalidAction(
                f"Cannot delete a user who has authored {authored} articles. "
                "Deactivate the account instead."
            )
        email = user.email
        user.delete()
        logger.info("User %s deleted by %s", email, identity.email)
        return api_response({"message": "User deleted successfully."})


__all__ = ["AdminStatsView", "NewsAnalyticsView", "UserAdminViewSet"]
