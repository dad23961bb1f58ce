"""DRF permission classes backed by ``access_control.policy``.

The classes raise the policy's exceptions instead of returning ``False`` so
the error category (role, permission, ownership) reaches the client.
"""

from typing import Optional

from rest_framework import permissions

from .policy import (
    Identity,
    authorize_mutation,
    require_identity,
    require_permission,
    require_role,
    resolve_identity,
    verify_ownership,
)


def request_identity(request) -> Optional[Identity]:
    """Resolve (once per request) the caller's identity; ``None`` if anonymous."""
    if not hasattr(request, "_identity"):
        request._identity = resolve_identity(getattr(request, "user", None))
    return request._identity


class IsIdentified(permissions.BasePermission):
    """Route demands a verified, active user."""

    def has_permission(self, request, view) -> bool:
        require_identity(request_identity(request))
        return True


class HasRole(permissions.BasePermission):
    """Caller's role must be one of ``view.allowed_roles``."""

    def has_permission(self, request, view) -> bool:
        require_role(request_identity(request), getattr(view, "allowed_roles", ()))
        return True


class HasPermission(permissions.BasePermission):
    """Caller must hold ``view.required_permission``."""

    def has_permission(self, request, view) -> bool:
        require_permission(request_identity(request), view.required_permission)
        return True


class NewsPermission(permissions.BasePermission):
    """Map viewset actions to article permissions.

    ``view.action_permissions`` maps each action name to a ``Permission`` or to
    ``None`` for actions open to anonymous callers. Mutating actions are
    decided in two steps: the capability here, ownership in
    ``has_object_permission`` once ``get_object`` has loaded the article.
    """

    def has_permission(self, request, view) -> bool:
        action = getattr(view, "action", None)
        if action is None:
            # Unsupported method; let the view answer 405.
            return True

        action_permissions = getattr(view, "action_permissions", {})
        if action not in action_permissions:
            require_identity(request_identity(request))
            return True

        required = action_permissions[action]
        if required is None:
            return True

        request.access_decision = authorize_mutation(request_identity(request), required)
        return True

    def has_object_permission(self, request, view, obj) -> bool:
        decision = getattr(request, "access_decision", None)
        if decision is not None:
            verify_ownership(decision, obj.author_email, obj.status)
        return True


__all__ = ["HasPermission", "HasRole", "IsIdentified", "NewsPermission", "request_identity"]
