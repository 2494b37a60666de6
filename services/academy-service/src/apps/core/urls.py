# services/academy-service/src/apps/core/urls.py
"""
URL configuration for Academy Service API

Endpoints:
    /api/v1/auth/          - Registration, login, current user, token refresh
    /api/v1/users/         - Profiles, password change, user administration
    /api/v1/courses/       - Course catalog and course management
    /api/v1/enrollments/   - Enrollment, progress, payments, notes
    /api/v1/admin/         - Dashboard, students, analytics, export
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from apps.core.views import (
    AuthViewSet,
    UserViewSet,
    CourseViewSet,
    EnrollmentViewSet,
    AdminViewSet,
)

router = DefaultRouter()
router.register(r'auth', AuthViewSet, basename='auth')
router.register(r'users', UserViewSet, basename='user')
router.register(r'courses', CourseViewSet, basename='course')
router.register(r'enrollments', EnrollmentViewSet, basename='enrollment')
router.register(r'admin', AdminViewSet, basename='admin')

urlpatterns = [
    path('', include(router.urls)),
]
