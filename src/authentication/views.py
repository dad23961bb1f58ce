"""Authentication endpoints: setup, register, login, logout and profile."""

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db.models import F
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.response import Response

from access_control.permissions import HasPermission, IsIdentified, request_identity
from access_control.policy import Permission, Role
from core.response import BaseAPIView, api_response
from .serializers import (
    ChangePasswordSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    SetupSerializer,
    UserDetailSerializer,
)
from .models import UserStatus
from .services import TokenService

User = get_user_model()
logger = logging.getLogger(__name__)


class SetupView(BaseAPIView):
    """Create the first administrator; refused once any user exists."""

    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        serializer = SetupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("Initial administrator %s created", user.email)
        token = TokenService.issue_token(user)
        return api_response(
            {"token": token, "user": UserDetailSerializer(user).data},
            status=status.HTTP_201_CREATED,
        )


class RegisterView(BaseAPIView):
    permission_classes = [HasPermission]
    required_permission = Permission.MANAGE_USERS

    def post(self, request):
        """Create a staff account on behalf of an administrator."""
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(
            "User %s (%s) registered by %s", user.email, user.role, request_identity(request).email
        )
        return api_response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Authenticate and issue a 24 hour bearer token."""
        serializer = LoginSerializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
        except AuthenticationFailed:
            logger.info("Failed login for %s", request.data.get("identifier"))
            raise
        user = serializer.validated_data["user"]

        User.objects.filter(pk=user.pk).update(
            last_login=timezone.now(), login_count=F("login_count") + 1
        )
        user.refresh_from_db(fields=["last_login", "login_count"])
        logger.info("User %s logged in", user.email)

        token = TokenService.issue_token(user, ttl=TokenService.LOGIN_TTL)
        return api_response({"token": token, "user": UserDetailSerializer(user).data})


class LogoutView(BaseAPIView):
    """Invalidate the current bearer token by blocklisting its jti."""

    permission_classes = [IsIdentified]

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Blocklist the bearer token and return 204 No Content."""
        payload = TokenService.decode_token(_get_bearer_token(request) or "")
        TokenService.block_token(payload["jti"], payload["exp"])
        logger.info("User %s logged out", request.user.email)
        # 204 responses must not include a body.
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(BaseAPIView):
    permission_classes = [IsIdentified]

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        """Return the current user's profile."""
        return api_response(UserDetailSerializer(request.user).data)


class VerifyView(BaseAPIView):
    """Confirm the bearer token is still valid and return its user."""

    permission_classes = [IsIdentified]

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        return api_response({"valid": True, "user": UserDetailSerializer(request.user).data})


class ProfileView(BaseAPIView):
    permission_classes = [IsIdentified]

    # noinspection PyMethodMayBeStatic
    def put(self, request):
        """Update name and avatar for the current user."""
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return api_response(UserDetailSerializer(request.user).data)


class ChangePasswordView(BaseAPIView):
    permission_classes = [IsIdentified]

    # noinspection PyMethodMayBeStatic
    def put(self, request):
        serializer = ChangePasswordSerializer(data=request.data, context={"user": request.user})
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("User %s changed password", request.user.email)
        return api_response({"message": "Password changed successfully."})


class CheckAdminView(BaseAPIView):
    """Tell a fresh installation whether setup is still required."""

    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        admin_count = User.objects.filter(role=Role.ADMIN, status=UserStatus.ACTIVE).count()
        return api_response({"has_admin": admin_count > 0, "admin_count": admin_count})


def _get_bearer_token(request) -> str | None:
    """Extract the Bearer token from Authorization header if present."""
    auth_header = request.META.get("HTTP_AUTHORIZATION", "")
    if auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1]
    return None


__all__ = [
    "ChangePasswordView",
    "CheckAdminView",
    "LoginView",
    "LogoutView",
    "MeView",
    "ProfileView",
    "RegisterView",
    "SetupView",
    "VerifyView",
]
