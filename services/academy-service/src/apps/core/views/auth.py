# services/academy-service/src/apps/core/views/auth.py
"""
Authentication ViewSet

Provides endpoints for:
- Registration and login
- Current user profile with enrolled courses
- Token refresh and logout
"""

import logging
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated

from apps.core.models import User
from apps.core.serializers import (
    RegisterSerializer,
    LoginSerializer,
    UserSerializer,
    EnrolledCourseSerializer,
)
from apps.core.services import AuthService, EnrollmentService
from shared.common.responses import success_response, created_response

logger = logging.getLogger(__name__)


def user_payload(user: User) -> dict:
    """User representation with a summary of the courses they are enrolled in."""
    data = UserSerializer(user).data
    if user.user_type == User.UserType.STUDENT:
        enrollments = EnrollmentService.get_student_enrollments(user)
        data['enrolled_courses'] = EnrolledCourseSerializer(enrollments, many=True).data
    else:
        data['enrolled_courses'] = []
    return data


class AuthViewSet(viewsets.ViewSet):
    """
    ViewSet for authentication operations.

    Endpoints:
    - POST /auth/register/ - Register new user
    - POST /auth/login/ - Login
    - GET /auth/me/ - Current user
    - POST /auth/logout/ - Logout
    - POST /auth/refresh/ - Issue a fresh token
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.auth_service = AuthService()

    def get_permissions(self):
        if self.action in ['register', 'login']:
            return [AllowAny()]
        return [IsAuthenticated()]

    @action(detail=False, methods=['post'])
    def register(self, request):
        """Register a new account and return it with a token."""
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        if not data.get('gender'):
            data.pop('gender', None)

        result = self.auth_service.register(**data)

        return created_response(
            data={
                'user': user_payload(result['user']),
                'token': result['token'],
            },
            message='User registered successfully'
        )

    @action(detail=False, methods=['post'])
    def login(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.auth_service.login(
            email=serializer.validated_data['email'],
            password=serializer.validated_data['password'],
            user_type=serializer.validated_data['user_type'],
        )

        return success_response(
            data={
                'user': user_payload(result['user']),
                'token': result['token'],
            },
            message='Login successful'
        )

    @action(detail=False, methods=['get'])
    def me(self, request):
        return success_response(data={'user': user_payload(request.user)})

    @action(detail=False, methods=['post'])
    def logout(self, request):
        self.auth_service.logout(request.user)
        return success_response(message='Logged out successfully')

    @action(detail=False, methods=['post'])
    def refresh(self, request):
        token = self.auth_service.refresh_token(request.user)
        return success_response(data={'token': token}, message='Token refreshed successfully')
