"""Serializers for authentication flows (setup, register, login, profile)."""

from typing import cast

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed

from access_control.policy import Role
from core.exceptions import Conflict, InvalidAction

from .managers import UserManager
from .models import UserStatus, username_validator

User = get_user_model()

PASSWORD_MIN_LENGTH = 6


class AccountSerializer(serializers.Serializer):
    """Fields shared by first-admin setup and admin-driven registration."""

    username = serializers.CharField(min_length=3, max_length=30, validators=[username_validator])
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=PASSWORD_MIN_LENGTH)
    full_name = serializers.CharField(max_length=100)

    @staticmethod
    def validate_email(value):
        return value.strip().lower()

    def validate(self, attrs):
        """Reject duplicate identity fields with a field-specific message."""
        if User.objects.filter(email__iexact=attrs["email"]).exists():
            raise Conflict("A user with this email already exists.")
        if User.objects.filter(username=attrs["username"]).exists():
            raise Conflict("A user with this username already exists.")
        return attrs


class SetupSerializer(AccountSerializer):
    """Create the very first account, always as an admin."""

    def validate(self, attrs):
        if User.objects.exists():
            raise InvalidAction("Setup has already been completed.")
        return super().validate(attrs)

    def create(self, validated_data):
        manager = cast(UserManager, User.objects)
        return manager.create_superuser(**validated_data)


class RegisterSerializer(AccountSerializer):
    """Admin-created staff account; role defaults to author."""

    role = serializers.ChoiceField(choices=Role.choices, default=Role.AUTHOR)

    def create(self, validated_data):
        manager = cast(UserManager, User.objects)
        return manager.create_user(**validated_data)


class LoginSerializer(serializers.Serializer):
    """Authenticate a user via email or username and bcrypt verification."""

    identifier = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        """Authenticate credentials and attach the user to validated_data."""
        try:
            user = User.objects.get_by_identifier(attrs["identifier"])
        except User.DoesNotExist:
            raise AuthenticationFailed("Invalid credentials")

        if not user.is_active:
            raise AuthenticationFailed("Account is not active")

        if not UserManager.verify_password(user, attrs["password"]):
            raise AuthenticationFailed("Invalid credentials")

        attrs["user"] = user
        return attrs


class UserDetailSerializer(serializers.ModelSerializer):
    """Read-only user profile payload for responses."""

    class Meta:
        """Expose identity, role and derived permissions; never the hash."""
        model = User
        fields = [
            "id",
            "username",
            "email",
            "full_name",
            "avatar",
            "role",
            "permissions",
            "status",
            "email_verified",
            "login_count",
            "last_login",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Fields a user may change on their own profile."""

    class Meta:
        """Allow partial updates of name and avatar."""
        model = User
        fields = ["full_name", "avatar"]
        extra_kwargs = {"full_name": {"required": False}, "avatar": {"required": False}}

    def validate(self, attrs):
        """Reject attempts to change identity or role fields here."""
        forbidden = {"email", "username", "role", "permissions", "status"}
        sent = forbidden.intersection(getattr(self, "initial_data", {}))
        if sent:
            raise serializers.ValidationError(
                f"{', '.join(sorted(sent))} cannot be updated via this endpoint"
            )
        return super().validate(attrs)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, min_length=PASSWORD_MIN_LENGTH)

    def validate(self, attrs):
        user = self.context["user"]
        if not UserManager.verify_password(user, attrs["current_password"]):
            raise InvalidAction("Current password is incorrect.")
        return attrs

    def save(self, **kwargs):
        user = self.context["user"]
        user.set_password(self.validated_data["new_password"])
        user.save(update_fields=["password_hash", "updated_at"])
        return user


class AdminUserUpdateSerializer(serializers.ModelSerializer):
    """Fields an administrator may change on another account."""

    role = serializers.ChoiceField(choices=Role.choices, required=False)
    status = serializers.ChoiceField(choices=UserStatus.choices, required=False)

    class Meta:
        model = User
        fields = ["full_name", "role", "status"]
        extra_kwargs = {"full_name": {"required": False}}


__all__ = [
    "AdminUserUpdateSerializer",
    "ChangePasswordSerializer",
    "LoginSerializer",
    "ProfileUpdateSerializer",
    "RegisterSerializer",
    "SetupSerializer",
    "UserDetailSerializer",
]
