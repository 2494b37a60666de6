# shared/common/permissions.py
"""
Authorization policy and the DRF permission classes built on it.

The policy functions are pure checks over (authenticated user, resource).
Views compose the permission classes for route-level checks and call the
``require_*`` functions directly for checks that need a loaded resource.
"""

import logging
from typing import Any, Iterable, Optional
from rest_framework import permissions
from rest_framework.request import Request
from rest_framework.views import APIView

from .exceptions import ForbiddenException

logger = logging.getLogger(__name__)


class Roles:
    """
    Role constants for the system.
    """

    ADMIN = 'admin'
    STUDENT = 'student'


# =============================================================================
# POLICY FUNCTIONS
# =============================================================================

def get_role(user) -> Optional[str]:
    """Role of an authenticated user, None for anonymous users"""
    if not user or not getattr(user, 'is_authenticated', False):
        return None
    return getattr(user, 'role', None)


def has_role(user, role: str) -> bool:
    return get_role(user) == role


def is_owner_or_admin(user, owner_id: Any) -> bool:
    if has_role(user, Roles.ADMIN):
        return True
    return get_role(user) is not None and str(user.id) == str(owner_id)


def require_role(user, role: str) -> None:
    """Raise ForbiddenException unless the user holds ``role``"""
    if not has_role(user, role):
        logger.warning(f"Role check failed: required={role} actual={get_role(user)}")
        raise ForbiddenException(f"Access denied. {role.capitalize()} role required.")


def require_owner_or_admin(user, owner_id: Any) -> None:
    """Raise ForbiddenException unless the user is an admin or owns the resource"""
    if not is_owner_or_admin(user, owner_id):
        raise ForbiddenException('Access denied. You can only access your own resources.')


# =============================================================================
# PERMISSION CLASSES
# =============================================================================

class BasePermission(permissions.BasePermission):
    """Base permission class with utility methods"""

    def get_user_role(self, request: Request) -> Optional[str]:
        return get_role(request.user)


class HasRole(BasePermission):
    """Check if user has one of the required roles"""

    required_roles: Iterable[str] = ()

    def has_permission(self, request: Request, view: APIView) -> bool:
        role = self.get_user_role(request)
        if role is None:
            return False
        if role not in self.required_roles:
            # 403 with a specific message rather than the generic one
            require_role(request.user, next(iter(self.required_roles)))
        return True


class IsAdmin(HasRole):
    """Only academy administrators"""
    required_roles = (Roles.ADMIN,)


class IsStudent(HasRole):
    """Only students"""
    required_roles = (Roles.STUDENT,)
