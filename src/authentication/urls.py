"""URL patterns for authentication endpoints."""

from django.urls import path

from .views import (
    ChangePasswordView,
    CheckAdminView,
    LoginView,
    LogoutView,
    MeView,
    ProfileView,
    RegisterView,
    SetupView,
    VerifyView,
)

urlpatterns = [
    path("setup/", SetupView.as_view(), name="auth-setup"),
    path("register/", RegisterView.as_view(), name="auth-register"),
    path("login/", LoginView.as_view(), name="auth-login"),
    path("logout/", LogoutView.as_view(), name="auth-logout"),
    path("me/", MeView.as_view(), name="auth-me"),
    path("verify/", VerifyView.as_view(), name="auth-verify"),
    path("profile/", ProfileView.as_view(), name="auth-profile"),
    path("change-password/", ChangePasswordView.as_view(), name="auth-change-password"),
    path("check-admin/", CheckAdminView.as_view(), name="auth-check-admin"),
]
