# services/academy-service/src/apps/core/views/__init__.py
"""
Academy Service Views

This module exports all ViewSets for the Academy Service API.
"""

from .auth import AuthViewSet
from .user import UserViewSet
from .course import CourseViewSet
from .enrollment import EnrollmentViewSet
from .admin_dashboard import AdminViewSet

__all__ = [
    'AuthViewSet',
    'UserViewSet',
    'CourseViewSet',
    'EnrollmentViewSet',
    'AdminViewSet',
]
