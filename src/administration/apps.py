"""App configuration for the administration dashboard endpoints."""

from django.apps import AppConfig


class AdministrationConfig(AppConfig):
    """Dashboard statistics, analytics and staff user management."""

    name = "administration"
