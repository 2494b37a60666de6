# services/academy-service/src/apps/core/tests/test_urls.py
"""
Tests for URL configuration

Loads the project urlconf and the DRF settings it depends on.
"""

import pytest
from django.urls import resolve
from rest_framework.settings import api_settings

from apps.core.authentication import JWTAuthentication
from apps.core.views import (
    AdminViewSet,
    AuthViewSet,
    CourseViewSet,
    EnrollmentViewSet,
    UserViewSet,
)


class TestUrlConf:

    def test_project_urlconf_imports(self):
        from config import urls

        assert urls.urlpatterns

    def test_default_authentication_class(self):
        assert api_settings.DEFAULT_AUTHENTICATION_CLASSES == [JWTAuthentication]

    @pytest.mark.parametrize('path, viewset', [
        ('/api/v1/auth/login/', AuthViewSet),
        ('/api/v1/users/', UserViewSet),
        ('/api/v1/courses/featured/list/', CourseViewSet),
        ('/api/v1/enrollments/my/', EnrollmentViewSet),
        ('/api/v1/admin/dashboard/', AdminViewSet),
    ])
    def test_routes_resolve(self, path, viewset):
        assert resolve(path).func.cls is viewset


@pytest.mark.django_db
def test_public_course_list_through_full_stack(api_client):
    response = api_client.get('/api/v1/courses/')

    assert response.status_code == 200
    assert response['X-Request-ID']
    assert response.json()['status'] == 'success'
