"""Unit tests for the role/permission policy and the DRF permission adapters."""

from __future__ import annotations

from types import SimpleNamespace

from django.contrib.auth.models import AnonymousUser
from django.test import SimpleTestCase
from rest_framework.exceptions import NotAuthenticated

from access_control.permissions import HasPermission, HasRole, NewsPermission
from access_control.policy import (
    Permission,
    Role,
    authorize_mutation,
    authorize_transition,
    canonical_permission_list,
    guard_self_target,
    permissions_for,
    require_permission,
    require_role,
    resolve_identity,
    verify_ownership,
)
from core.exceptions import InvalidAction, OwnershipForbidden, PermissionForbidden, RoleForbidden


def make_user(role, email="writer@example.com", active=True, pk="1"):
    return SimpleNamespace(pk=pk, email=email, role=role, is_authenticated=True, is_active=active)


def identity_for(role, **kwargs):
    return resolve_identity(make_user(role, **kwargs))


class PermissionDerivationTests(SimpleTestCase):
    def test_admin_holds_every_permission(self):
        self.assertEqual(permissions_for(Role.ADMIN), frozenset(Permission.values))

    def test_editor_holds_everything_but_user_management(self):
        self.assertEqual(
            permissions_for(Role.EDITOR),
            frozenset(Permission.values) - {"manage_users"},
        )

    def test_author_can_only_create_and_edit(self):
        self.assertEqual(
            permissions_for(Role.AUTHOR), {"create_news", "edit_news"}
        )

    def test_unknown_role_has_no_permissions(self):
        self.assertEqual(permissions_for("reviewer"), frozenset())

    def test_canonical_list_follows_declaration_order(self):
        self.assertEqual(canonical_permission_list("author"), ["create_news", "edit_news"])
        self.assertEqual(canonical_permission_list(Role.ADMIN), list(Permission.values))


class IdentityResolutionTests(SimpleTestCase):
    def test_anonymous_and_missing_users_resolve_to_none(self):
        self.assertIsNone(resolve_identity(None))
        self.assertIsNone(resolve_identity(AnonymousUser()))

    def test_inactive_user_is_anonymous(self):
        self.assertIsNone(identity_for(Role.ADMIN, active=False))

    def test_identity_carries_role_permissions(self):
        identity = identity_for(Role.EDITOR)
        self.assertTrue(identity.is_privileged)
        self.assertFalse(identity.is_admin)
        self.assertTrue(identity.has_permission(Permission.PUBLISH_NEWS))
        self.assertFalse(identity.has_permission(Permission.MANAGE_USERS))


class RequirementTests(SimpleTestCase):
    def test_require_role_rejects_other_roles(self):
        with self.assertRaises(RoleForbidden):
            require_role(identity_for(Role.EDITOR), [Role.ADMIN])
        self.assertEqual(require_role(identity_for(Role.ADMIN), [Role.ADMIN]).role, "admin")

    def test_require_permission_without_identity_is_unauthenticated(self):
        with self.assertRaises(NotAuthenticated):
            require_permission(None, Permission.CREATE_NEWS)

    def test_require_permission_rejects_missing_permission(self):
        with self.assertRaises(PermissionForbidden):
            require_permission(identity_for(Role.AUTHOR), Permission.PUBLISH_NEWS)

    def test_admin_passes_every_permission_check(self):
        identity = identity_for(Role.ADMIN)
        for permission in Permission.values:
            self.assertIs(require_permission(identity, permission), identity)


class MutationAuthorizationTests(SimpleTestCase):
    def test_privileged_roles_skip_ownership(self):
        for role in (Role.ADMIN, Role.EDITOR):
            decision = authorize_mutation(identity_for(role), Permission.EDIT_NEWS)
            self.assertFalse(decision.requires_ownership)

    def test_author_edit_requires_ownership(self):
        decision = authorize_mutation(identity_for(Role.AUTHOR), Permission.EDIT_NEWS)
        self.assertTrue(decision.requires_ownership)
        self.assertFalse(decision.draft_only)

    def test_author_delete_is_limited_to_own_drafts(self):
        decision = authorize_mutation(identity_for(Role.AUTHOR), Permission.DELETE_NEWS)
        self.assertTrue(decision.requires_ownership)
        self.assertTrue(decision.draft_only)

    def test_anonymous_mutation_is_unauthenticated(self):
        with self.assertRaises(NotAuthenticated):
            authorize_mutation(None, Permission.CREATE_NEWS)

    def test_ownership_comparison_ignores_case(self):
        decision = authorize_mutation(
            identity_for(Role.AUTHOR, email="writer@example.com"), Permission.EDIT_NEWS
        )
        verify_ownership(decision, "Writer@Example.COM", "published")

    def test_foreign_article_is_rejected(self):
        decision = authorize_mutation(identity_for(Role.AUTHOR), Permission.EDIT_NEWS)
        with self.assertRaises(OwnershipForbidden):
            verify_ownership(decision, "someone@example.com", "draft")

    def test_author_cannot_delete_own_published_article(self):
        decision = authorize_mutation(identity_for(Role.AUTHOR), Permission.DELETE_NEWS)
        verify_ownership(decision, "writer@example.com", "draft")
        with self.assertRaises(OwnershipForbidden):
            verify_ownership(decision, "writer@example.com", "published")


class TransitionTests(SimpleTestCase):
    def test_publishing_requires_publish_permission(self):
        with self.assertRaises(PermissionForbidden):
            authorize_transition(identity_for(Role.AUTHOR), "draft", "published")
        authorize_transition(identity_for(Role.EDITOR), "draft", "published")

    def test_other_transitions_are_free(self):
        author = identity_for(Role.AUTHOR)
        authorize_transition(author, "draft", "archived")
        authorize_transition(author, "published", "draft")
        authorize_transition(author, "published", "published")


class SelfTargetTests(SimpleTestCase):
    def test_own_account_is_refused(self):
        identity = identity_for(Role.ADMIN, pk="42")
        with self.assertRaises(InvalidAction):
            guard_self_target(identity, "42")
        self.assertIs(guard_self_target(identity, "43"), identity)


class PermissionClassTests(SimpleTestCase):
    """Exercise the DRF adapters with lightweight request/view stand-ins."""

    @staticmethod
    def request_for(user):
        return SimpleNamespace(user=user)

    def test_news_permission_allows_public_actions_anonymously(self):
        view = SimpleNamespace(action="list", action_permissions={"list": None})
        request = self.request_for(AnonymousUser())
        self.assertTrue(NewsPermission().has_permission(request, view))

    def test_news_permission_checks_ownership_after_loading(self):
        view = SimpleNamespace(
            action="update", action_permissions={"update": Permission.EDIT_NEWS}
        )
        request = self.request_for(make_user(Role.AUTHOR))
        permission = NewsPermission()

        self.assertTrue(permission.has_permission(request, view))
        self.assertTrue(request.access_decision.requires_ownership)

        own = SimpleNamespace(author_email="writer@example.com", status="draft")
        foreign = SimpleNamespace(author_email="other@example.com", status="draft")
        self.assertTrue(permission.has_object_permission(request, view, own))
        with self.assertRaises(OwnershipForbidden):
            permission.has_object_permission(request, view, foreign)

    def test_news_permission_undeclared_action_requires_identity(self):
        view = SimpleNamespace(action="archive", action_permissions={})
        with self.assertRaises(NotAuthenticated):
            NewsPermission().has_permission(self.request_for(AnonymousUser()), view)

    def test_has_role_uses_view_roles(self):
        view = SimpleNamespace(allowed_roles=[Role.ADMIN])
        with self.assertRaises(RoleForbidden):
            HasRole().has_permission(self.request_for(make_user(Role.EDITOR)), view)
        self.assertTrue(HasRole().has_permission(self.request_for(make_user(Role.ADMIN)), view))

    def test_has_permission_uses_view_requirement(self):
        view = SimpleNamespace(required_permission=Permission.VIEW_ANALYTICS)
        with self.assertRaises(PermissionForbidden):
            HasPermission().has_permission(self.request_for(make_user(Role.AUTHOR)), view)
        self.assertTrue(
            HasPermission().has_permission(self.request_for(make_user(Role.EDITOR)), view)
        )
