"""Staff user model: bcrypt-hashed passwords, a single role and derived permissions.

We avoid Django's built-in groups/permissions (no PermissionsMixin): the
permission list stored on each user is always the canonical set for its
role and is rewritten on every save.
"""

import uuid
from typing import ClassVar, Optional

from django.contrib.auth.models import AbstractBaseUser
from django.core.validators import RegexValidator
from django.db import models

from access_control.policy import Role, canonical_permission_list
from .managers import UserManager


class UserStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"
    SUSPENDED = "suspended", "Suspended"


username_validator = RegexValidator(
    r"^[a-zA-Z0-9_]+$", "Username may only contain letters, digits and underscores."
)


class User(AbstractBaseUser):
    """Newsroom staff member identified by email or username."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = models.CharField(max_length=30, unique=True, validators=[username_validator])
    email = models.EmailField(unique=True)
    password_hash = models.CharField(max_length=128)
    full_name = models.CharField(max_length=100)
    avatar = models.URLField(blank=True)
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.AUTHOR)
    permissions = models.JSONField(default=list, editable=False)
    status = models.CharField(max_length=10, choices=UserStatus.choices, default=UserStatus.ACTIVE)
    login_count = models.PositiveIntegerField(default=0)
    email_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS: ClassVar[list[str]] = ["username", "full_name"]

    objects = UserManager()

    class Meta:
        """Default ordering shows newest users first."""
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["role", "status"], name="user_role_status_idx")]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.email

    @property
    def is_active(self) -> bool:  # type: ignore[override]
        return self.status == UserStatus.ACTIVE

    @property
    def display_name(self) -> str:
        return self.full_name or self.username

    def save(self, *args, **kwargs):
        self.email = (self.email or "").strip().lower()
        self.permissions = canonical_permission_list(self.role)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "role" in update_fields:
            kwargs["update_fields"] = {*update_fields, "permissions"}
        super().save(*args, **kwargs)

    def has_permission(self, permission: str) -> bool:
        return self.role == Role.ADMIN or permission in self.permissions

    def set_password(self, raw_password: Optional[str]) -> None:  # type: ignore[override]
        """Override to ensure bcrypt hashing via manager utility."""

        if raw_password is None:
            self.password_hash = ""
        else:
            self.password_hash = UserManager.hash_password(raw_password)

    def check_password(self, raw_password: Optional[str]) -> bool:  # type: ignore[override]
        """Delegate to bcrypt verification helper."""

        if raw_password is None:
            return False
        return UserManager.verify_password(self, raw_password)


__all__ = ["User", "UserStatus"]
