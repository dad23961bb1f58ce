"""Success side of the newsroom API envelope.

Every 2xx body is ``{"data": ..., "errors": []}``; failures are shaped by
``core.handlers``. Views either build the body with ``api_response`` or
return DRF's bare payloads and let ``EnvelopeMixin`` wrap them.
"""

from typing import Any

from rest_framework import status as http_status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import ModelViewSet


def success_body(data: Any) -> dict[str, Any]:
    return {"data": data, "errors": []}


def api_response(data: Any, status: int = http_status.HTTP_200_OK) -> Response:
    """Article lists, auth payloads and admin reports all go out through here."""

    return Response(success_body(data), status=status)


def _needs_envelope(response) -> bool:
    if not http_status.is_success(response.status_code):
        return False
    if response.status_code == http_status.HTTP_204_NO_CONTENT:
        return False
    payload = getattr(response, "data", None)
    return not (isinstance(payload, dict) and payload.keys() >= {"data", "errors"})


class EnvelopeMixin:
    """Wrap bare DRF payloads (create, update, OPTIONS metadata) on success."""

    def finalize_response(self, request, response, *args, **kwargs):  # type: ignore[override]
        if hasattr(response, "data") and _needs_envelope(response):
            response.data = success_body(response.data)
        return super().finalize_response(request, response, *args, **kwargs)  # type: ignore[attr-defined]


class BaseAPIView(EnvelopeMixin, APIView):
    """Plain endpoint (auth, admin reports, health)."""


class BaseViewSet(EnvelopeMixin, ModelViewSet):
    """Model viewset for staff article management."""


__all__ = ["BaseAPIView", "BaseViewSet", "EnvelopeMixin", "api_response", "success_body"]
