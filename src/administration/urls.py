"""Routing for the admin dashboard, mounted under ``/admin/``."""

from django.urls import path

from .views import AdminStatsView, NewsAnalyticsView, UserAdminViewSet

user_list = UserAdminViewSet.as_view({"get": "list"})
user_detail = UserAdminViewSet.as_view({"put": "update", "delete": "destroy"})

urlpatterns = [
    path("stats/", AdminStatsView.as_view(), name="admin-stats"),
    path("users/", user_list, name="admin-users"),
    path("users/<str:pk>/", user_detail, name="admin-user-detail"),
    path("analytics/news/", NewsAnalyticsView.as_view(), name="admin-news-analytics"),
]
