"""Role/permission model and the access-control evaluator.

Roles are plain tagged values and every role maps to a fixed permission set
through ``permissions_for``. Nothing in this module touches the database:
callers resolve the user (middleware) and load the target record (views),
this module only decides.

Mutation routes are authorized in two phases. ``authorize_mutation`` checks
the capability and returns an ``AccessDecision``; once the view has loaded
the article it calls ``verify_ownership`` with that decision.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from django.db import models
from rest_framework.exceptions import NotAuthenticated

from core.exceptions import (
    InvalidAction,
    OwnershipForbidden,
    PermissionForbidden,
    RoleForbidden,
)


class Role(models.TextChoices):
    ADMIN = "admin", "Admin"
    EDITOR = "editor", "Editor"
    AUTHOR = "author", "Author"


class Permission(models.TextChoices):
    CREATE_NEWS = "create_news", "Create news"
    EDIT_NEWS = "edit_news", "Edit news"
    DELETE_NEWS = "delete_news", "Delete news"
    PUBLISH_NEWS = "publish_news", "Publish news"
    MANAGE_USERS = "manage_users", "Manage users"
    VIEW_ANALYTICS = "view_analytics", "View analytics"


ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    Role.ADMIN.value: frozenset(Permission.values),
    Role.EDITOR.value: frozenset(Permission.values) - {Permission.MANAGE_USERS.value},
    Role.AUTHOR.value: frozenset({Permission.CREATE_NEWS.value, Permission.EDIT_NEWS.value}),
}

# Roles that see unpublished articles and may act on articles they did not write.
PRIVILEGED_ROLES = frozenset({Role.ADMIN.value, Role.EDITOR.value})

PUBLISHED = "published"
DRAFT = "draft"


def _value(choice: Any) -> Any:
    return getattr(choice, "value", choice)


def permissions_for(role: str) -> frozenset[str]:
    """Return the canonical permission set for ``role`` (empty if unknown)."""
    return ROLE_PERMISSIONS.get(_value(role), frozenset())


def canonical_permission_list(role: str) -> list[str]:
    """Permission set in declaration order, for persistence and payloads."""
    granted = permissions_for(role)
    return [value for value in Permission.values if value in granted]


@dataclass(frozen=True)
class Identity:
    """A request's resolved caller."""

    user: Any
    role: str
    permissions: frozenset[str]

    @property
    def user_id(self) -> str:
        return str(self.user.pk)

    @property
    def email(self) -> str:
        return (self.user.email or "").lower()

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES

    def has_permission(self, permission: str) -> bool:
        # Admin is authorization-complete.
        return self.is_admin or _value(permission) in self.permissions


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a capability check that may still need an ownership check."""

    identity: Identity
    requires_ownership: bool = False
    draft_only: bool = False


def resolve_identity(user: Any) -> Optional[Identity]:
    """Build an ``Identity`` for an active user; ``None`` means anonymous."""
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    if not getattr(user, "is_active", False):
        return None
    role = _value(getattr(user, "role", None))
    return Identity(user=user, role=role, permissions=permissions_for(role))


def require_identity(identity: Optional[Identity]) -> Identity:
    if identity is None:
        raise NotAuthenticated("Authentication required.")
    return identity


def require_role(identity: Optional[Identity], roles: Iterable[str]) -> Identity:
    identity = require_identity(identity)
    if identity.role not in {_value(role) for role in roles}:
        raise RoleForbidden()
    return identity


def require_permission(identity: Optional[Identity], permission: str) -> Identity:
    identity = require_identity(identity)
    if not identity.has_permission(permission):
        raise PermissionForbidden(f"Missing permission: {_value(permission)}.")
    return identity


def authorize_mutation(identity: Optional[Identity], permission: str) -> AccessDecision:
    """Capability check for an article mutation.

    Admins and editors act on any article; editors need this to publish an
    author's draft in the review workflow. Everyone else must own the target,
    which is only known after the article is loaded. Authors never hold
    ``delete_news`` but may still delete their own drafts.
    """
    identity = require_identity(identity)
    if identity.is_privileged and identity.has_permission(permission):
        return AccessDecision(identity)
    if permission == Permission.DELETE_NEWS and not identity.has_permission(permission):
        if identity.has_permission(Permission.EDIT_NEWS):
            return AccessDecision(identity, requires_ownership=True, draft_only=True)
        raise PermissionForbidden(f"Missing permission: {_value(permission)}.")
    require_permission(identity, permission)
    return AccessDecision(identity, requires_ownership=True)


def verify_ownership(decision: AccessDecision, owner_email: str, status: str | None = None) -> None:
    """Second phase of ``authorize_mutation``, run against the loaded record."""
    if not decision.requires_ownership:
        return
    if (owner_email or "").lower() != decision.identity.email:
        raise OwnershipForbidden()
    if decision.draft_only and status != DRAFT:
        raise OwnershipForbidden("You can only delete your own drafts.")


def authorize_transition(identity: Identity, current_status: str, new_status: str) -> None:
    """Escalating an article to published requires ``publish_news``."""
    if new_status == PUBLISHED and current_status != PUBLISHED:
        if not identity.has_permission(Permission.PUBLISH_NEWS):
            raise PermissionForbidden("You are not allowed to publish articles.")


def guard_self_target(identity: Optional[Identity], target_id: Any) -> Identity:
    """Refuse admin user-management actions aimed at the caller's own account."""
    identity = require_identity(identity)
    if str(target_id) == identity.user_id:
        raise InvalidAction("You cannot modify or delete your own account here.")
    return identity


__all__ = [
    "AccessDecision",
    "DRAFT",
    "Identity",
    "PRIVILEGED_ROLES",
    "PUBLISHED",
    "Permission",
    "ROLE_PERMISSIONS",
    "Role",
    "authorize_mutation",
    "authorize_transition",
    "canonical_permission_list",
    "guard_self_target",
    "permissions_for",
    "require_identity",
    "require_permission",
    "require_role",
    "resolve_identity",
    "verify_ownership",
]
