"""API error taxonomy.

Every error response carries a category label (``code``) that clients can
rely on; the human-readable message is not part of the contract.
"""

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    AuthenticationFailed,
    MethodNotAllowed,
    NotAuthenticated,
    NotFound,
    ParseError,
    PermissionDenied,
    ValidationError,
)


class RoleForbidden(PermissionDenied):
    default_detail = "Your role does not allow access to this resource."
    default_code = "role_forbidden"


class PermissionForbidden(PermissionDenied):
    default_detail = "You do not have the permission required for this action."
    default_code = "permission_forbidden"


class OwnershipForbidden(PermissionDenied):
    default_detail = "You can only modify your own articles."
    default_code = "ownership_forbidden"


class InvalidAction(APIException):
    """A well-formed request that the current state refuses (400)."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "This action is not allowed."
    default_code = "invalid_action"


class Conflict(APIException):
    """Duplicate username or email (400)."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "This record already exists."
    default_code = "conflict"


UNAUTHENTICATED_MESSAGE = (
    "Authentication credentials were not provided or are invalid, "
    "token revoked, or user is inactive."
)

# Order matters: subclasses before their bases.
_CODES_BY_TYPE: tuple[tuple[type, str], ...] = (
    (RoleForbidden, "role_forbidden"),
    (PermissionForbidden, "permission_forbidden"),
    (OwnershipForbidden, "ownership_forbidden"),
    (InvalidAction, "invalid_action"),
    (Conflict, "conflict"),
    (NotAuthenticated, "unauthenticated"),
    (AuthenticationFailed, "unauthenticated"),
    (ValidationError, "validation_error"),
    (ParseError, "validation_error"),
    (NotFound, "not_found"),
    (Http404, "not_found"),
    (MethodNotAllowed, "method_not_allowed"),
    (PermissionDenied, "forbidden"),
    (DjangoPermissionDenied, "forbidden"),
)


def error_code_for(exc: Exception) -> str:
    """Return the category label for an exception."""
    for exc_type, code in _CODES_BY_TYPE:
        if isinstance(exc, exc_type):
            return code
    if isinstance(exc, APIException):
        return exc.default_code
    return "server_error"


__all__ = [
    "Conflict",
    "InvalidAction",
    "OwnershipForbidden",
    "PermissionForbidden",
    "RoleForbidden",
    "UNAUTHENTICATED_MESSAGE",
    "error_code_for",
]
