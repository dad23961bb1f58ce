"""Bridge between ``JWTAuthMiddleware`` and DRF's authentication hooks.

The middleware already verified the bearer token; DRF only needs to see the
user it attached. Anonymous requests are left unauthenticated here and the
permission classes decide whether that is acceptable for the route.
"""

from typing import Any, Optional, Tuple

from rest_framework.authentication import BaseAuthentication


class MiddlewareUserAuthentication(BaseAuthentication):
    """Expose ``request._request.user`` (set by middleware) to DRF."""

    def authenticate(self, request) -> Optional[Tuple[Any, None]]:
        # DRF's Request wraps the original Django HttpRequest as ``_request``.
        django_request = getattr(request, "_request", None)
        user = getattr(django_request, "user", None)
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return user, None

    def authenticate_header(self, request) -> str:
        """Advertise bearer auth so DRF answers 401 rather than 403."""
        return 'Bearer realm="api"'


__all__ = ["MiddlewareUserAuthentication"]
