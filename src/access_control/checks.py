"""System checks for access-control configuration."""

from django.core.checks import Error, register

from access_control.permissions import HasPermission, HasRole, NewsPermission


@register()
def protected_views_declare_requirements(app_configs, **kwargs):
    """Ensure views using the policy-backed permission classes configure them.

    Only the project's own views are inspected; new protected views must be
    added to the list below.
    """
    errors: list[Error] = []

    # Import here to avoid circular imports at module load time.
    from administration.views import AdminStatsView, NewsAnalyticsView
    from articles.views import ArticleViewSet
    from authentication.views import RegisterView

    protected_views = [ArticleViewSet, AdminStatsView, NewsAnalyticsView, RegisterView]
    requirements = (
        (NewsPermission, "action_permissions", "access_control.E001"),
        (HasRole, "allowed_roles", "access_control.E002"),
        (HasPermission, "required_permission", "access_control.E003"),
    )

    for view_cls in protected_views:
        permission_classes = getattr(view_cls, "permission_classes", [])
        for permission_cls, attribute, check_id in requirements:
            if permission_cls in permission_classes and not getattr(view_cls, attribute, None):
                errors.append(
                    Error(
                        f"{view_cls.__name__} uses {permission_cls.__name__} but does not "
                        f"define {attribute}.",
                        obj=view_cls,
                        id=check_id,
                    )
                )

    return errors
