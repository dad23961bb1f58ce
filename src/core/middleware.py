"""Middleware that resolves the bearer token into ``request.user``.

A missing, malformed, expired or revoked token, or one whose user no longer
exists or is not active, leaves the request anonymous. Routes that demand an
identity reject anonymous callers through DRF with a 401; optional-identity
routes simply serve the anonymous view. The reason is kept on
``request.auth_error`` for the exception handler's debug output.
"""

import logging
from typing import Optional

from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed

from authentication.models import User
from authentication.services import BlocklistUnavailable, TokenService

logger = logging.getLogger(__name__)


class JWTAuthMiddleware(MiddlewareMixin):
    """Decode the bearer JWT, check the blocklist, and attach request.user."""

    def process_request(self, request):  # type: ignore[override]
        request.user = AnonymousUser()
        request.auth_error = None

        auth_header = request.META.get("HTTP_AUTHORIZATION", "")
        if not auth_header or not auth_header.startswith("Bearer "):
            return None

        token = auth_header.split(" ", 1)[1]

        try:
            payload = TokenService.decode_token(token)
            jti = payload.get("jti")
            if not jti:
                raise AuthenticationFailed("Invalid token")

            if TokenService.is_token_blocked(jti):
                raise AuthenticationFailed("Token has been revoked")

            user = self._get_user(payload.get("userId"))
            if not user or not user.is_active:
                raise AuthenticationFailed("User not found or inactive")

        except AuthenticationFailed as exc:
            request.auth_error = str(exc.detail)
            logger.info("Bearer token rejected: %s", request.auth_error)
            return None
        except BlocklistUnavailable:
            logger.error("Token blocklist unavailable; refusing request")
            return _service_unavailable()

        request.user = user
        return None

    @staticmethod
    def _get_user(user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        try:
            return User.objects.get(id=user_id)
        except (User.DoesNotExist, ValidationError, ValueError):
            return None


def _service_unavailable() -> JsonResponse:
    return JsonResponse(
        {
            "data": None,
            "errors": ["Authentication service unavailable (blocklist)."],
            "code": "service_unavailable",
        },
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


__all__ = ["JWTAuthMiddleware"]
