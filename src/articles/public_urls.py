"""Routing for the public/mobile read API, mounted under ``/public/``."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import CategoryListView, PublicNewsViewSet, PublicSearchView

router = SimpleRouter()
router.register(r"news", PublicNewsViewSet, basename="public-news")

urlpatterns = [
    path("categories/", CategoryListView.as_view(), name="public-categories"),
    path("search/", PublicSearchView.as_view(), name="public-search"),
    path("", include(router.urls)),
]
