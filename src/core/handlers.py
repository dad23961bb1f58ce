"""Custom exception handling to enforce the API error envelope."""

import logging
from typing import Any

from django.conf import settings
from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from authentication.services import BlocklistUnavailable
from .exceptions import UNAUTHENTICATED_MESSAGE, error_code_for

logger = logging.getLogger(__name__)


def _normalize_errors(payload: Any) -> list[Any]:
    """Convert DRF's response.data into a list for the envelope."""

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and "detail" in payload:
        # Common DRF pattern: {"detail": "..."}
        return [payload["detail"]]
    return [payload]


def error_body(errors: list[Any], code: str) -> dict[str, Any]:
    return {"data": None, "errors": errors, "code": code}


def custom_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """Wrap DRF errors in `{ "data": null, "errors": [...], "code": ... }` shape.

    - Uses DRF's default handler to produce the base response.
    - Forces 401 for authentication failures; DRF downgrades them to 403 when
      no authenticator advertises a WWW-Authenticate header.
    - Optionally exposes more detailed auth errors when DEBUG_AUTH_ERRORS is enabled.
    - Anything DRF does not map becomes a logged 500 whose message is only
      detailed in DEBUG.
    """

    # Blocklist connectivity errors are security-critical and must fail-closed.
    if isinstance(exc, BlocklistUnavailable):
        logger.error("Token blocklist unavailable: %s", exc)
        return Response(
            error_body(["Authentication service unavailable (blocklist)."], "service_unavailable"),
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    # Treat database errors as a temporary service outage and still respect the
    # global envelope format instead of returning Django's HTML 500 page.
    if isinstance(exc, DatabaseError):
        logger.error("Database error: %s", exc)
        return Response(
            error_body(["Service temporarily unavailable."], "service_unavailable"),
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    response = drf_exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.error(
            "Unhandled error in %s",
            type(view).__name__ if view is not None else "request",
            exc_info=exc,
        )
        message = str(exc) if settings.DEBUG else "Something went wrong."
        return Response(
            error_body([message], "server_error"),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        response.status_code = status.HTTP_401_UNAUTHORIZED

    if response.status_code == status.HTTP_401_UNAUTHORIZED:
        if getattr(settings, "DEBUG_AUTH_ERRORS", False):
            # Surface the specific reason (e.g. "Token has expired").
            reason = getattr(context.get("request"), "auth_error", None)
            errors = [reason] if reason else _normalize_errors(response.data)
        else:
            errors = [UNAUTHENTICATED_MESSAGE]
    else:
        errors = _normalize_errors(response.data)

    response.data = error_body(errors, error_code_for(exc))
    return response


__all__ = ["custom_exception_handler", "error_body"]
