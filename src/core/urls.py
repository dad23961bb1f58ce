"""Root URL configuration for the security newsroom API."""
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView

from .views import HealthView

urlpatterns = [
    path("auth/", include("authentication.urls")),
    path("admin/", include("administration.urls")),
    path("public/", include("articles.public_urls")),
    path("", include("articles.urls")),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("health/", HealthView.as_view(), name="health"),
]
