# services/academy-service/src/apps/core/tests/conftest.py
"""
Pytest Configuration and Fixtures

Provides common fixtures for all Academy Service tests.
"""

import pytest
import uuid
from datetime import timedelta

from rest_framework.test import APIClient

from apps.core.models import User, Course
from apps.core.services import AuthService, AuthConfig, CourseService


# ==================== CLIENT FIXTURES ====================

@pytest.fixture
def api_client() -> APIClient:
    """Return a DRF API client instance."""
    return APIClient()


# ==================== AUTH FIXTURES ====================

@pytest.fixture
def auth_config() -> AuthConfig:
    return AuthConfig(
        secret_key='test-secret-key',
        token_lifetime=timedelta(days=7),
        max_login_attempts=5,
        lockout_duration=timedelta(hours=2),
        allow_admin_registration=False,
    )


@pytest.fixture
def auth_service(auth_config) -> AuthService:
    return AuthService(config=auth_config)


# ==================== USER FIXTURES ====================

@pytest.fixture
def user_password() -> str:
    """Standard password for test users."""
    return 'Pilot123'


@pytest.fixture
def create_user(db, user_password):
    """Factory fixture to create test users."""
    def _create_user(
        email: str = None,
        password: str = None,
        user_type: str = User.UserType.STUDENT,
        **kwargs
    ) -> User:
        if email is None:
            email = f"user_{uuid.uuid4().hex[:8]}@test.com"

        kwargs.setdefault('first_name', 'Test')
        kwargs.setdefault('last_name', 'User')
        kwargs.setdefault('phone', '+1 555 0100')

        return User.objects.create_user(
            email=email,
            password=password or user_password,
            user_type=user_type,
            **kwargs
        )

    return _create_user


@pytest.fixture
def student_user(create_user) -> User:
    return create_user(
        email='student@test.com',
        first_name='Amelia',
        last_name='Earhart',
        address_state='KS',
    )


@pytest.fixture
def other_student(create_user) -> User:
    return create_user(email='other@test.com', first_name='Bessie', last_name='Coleman')


@pytest.fixture
def admin_user(create_user) -> User:
    return create_user(
        email='admin@test.com',
        first_name='Chief',
        last_name='Instructor',
        user_type=User.UserType.ADMIN,
    )


# ==================== COURSE FIXTURES ====================

@pytest.fixture
def create_course(db, admin_user):
    """Factory fixture to create courses through the catalog service."""
    def _create_course(**kwargs) -> Course:
        data = {
            'title': 'Private Pilot License',
            'description': 'Ground school and flight training for the PPL.',
            'duration': '6 months',
            'price': '$12,000',
            'category': Course.Category.LICENSE,
            'level': Course.Level.BEGINNER,
            'max_students': 20,
        }
        data.update(kwargs)
        return CourseService.create_course(admin_user, data)

    return _create_course


@pytest.fixture
def course(create_course) -> Course:
    return create_course()


# ==================== AUTHENTICATED CLIENTS ====================

def _authenticated_client(user: User) -> APIClient:
    client = APIClient()
    token = AuthService().issue_token(user.id)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    return client


@pytest.fixture
def student_client(student_user) -> APIClient:
    return _authenticated_client(student_user)


@pytest.fixture
def admin_client(admin_user) -> APIClient:
    return _authenticated_client(admin_user)

