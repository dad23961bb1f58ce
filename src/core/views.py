"""Service-level endpoints that belong to no particular app."""

from typing import Any

from django.db import connection
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .handlers import error_body
from .redis_client import redis_available
from .response import BaseAPIView, api_response


class HealthView(BaseAPIView):
    """Report database and Redis reachability.

    A database failure propagates to the exception handler (503); an
    unreachable Redis is reported here with the same status.
    """

    permission_classes = [AllowAny]
    authentication_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        if not redis_available():
            return Response(
                error_body(["Redis is unavailable."], "service_unavailable"),
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return api_response({"status": "ok", "database": True, "redis": True})


__all__ = ["HealthView"]
