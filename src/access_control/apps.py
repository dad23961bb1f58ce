"""App configuration for the access_control Django application.

The app owns no models; it holds the role/permission policy and registers
the system checks for views that depend on it.
"""

from django.apps import AppConfig


class AccessControlConfig(AppConfig):
    """Application configuration for the access_control app."""

    name = "access_control"
    verbose_name = "Access control"

    def ready(self) -> None:
        """Register system checks when the app is loaded."""
        from . import checks  # noqa: F401
