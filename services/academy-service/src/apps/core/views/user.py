# services/academy-service/src/apps/core/views/user.py
"""
User ViewSet

Provides endpoints for:
- Profile read and update (owner or admin)
- Password change (owner only)
- User listing, deactivation and statistics (admin)
"""

import logging
from rest_framework import viewsets, filters
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.models import User
from apps.core.serializers import (
    UserSerializer,
    UserListSerializer,
    UserUpdateSerializer,
    PasswordChangeSerializer,
)
from apps.core.services import AuthService, UserService
from shared.common.exceptions import ForbiddenException
from shared.common.permissions import IsAdmin
from shared.common.responses import success_response
from .filters import UserFilter

logger = logging.getLogger(__name__)


class UserViewSet(viewsets.GenericViewSet):
    """
    ViewSet for User management.

    Endpoints:
    - GET /users/ - List users (admin, paginated)
    - GET /users/{id}/ - Get profile
    - PUT /users/{id}/ - Update profile
    - DELETE /users/{id}/ - Deactivate user (admin, soft delete)
    - PUT /users/{id}/password/ - Change own password
    - GET /users/analytics/stats/ - User statistics (admin)
    """

    queryset = User.objects.all()
    serializer_class = UserSerializer
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = UserFilter
    ordering_fields = ['created_at', 'email', 'last_name', 'last_login']
    ordering = ['-created_at']

    def get_permissions(self):
        if self.action in ['list', 'destroy', 'stats']:
            return [IsAdmin()]
        return [IsAuthenticated()]

    def get_serializer_class(self):
        if self.action == 'list':
            return UserListSerializer
        if self.action == 'update':
            return UserUpdateSerializer
        if self.action == 'password':
            return PasswordChangeSerializer
        return UserSerializer

    # ==================== CRUD OPERATIONS ====================

    def list(self, request):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = UserListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request, pk=None):
        user = UserService.get_user_for(request.user, pk)
        return success_response(data={'user': UserSerializer(user).data})

    def update(self, request, pk=None):
        serializer = UserUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = UserService.update_profile(request.user, pk, serializer.to_model_fields())

        return success_response(
            data={'user': UserSerializer(user).data},
            message='Profile updated successfully'
        )

    def destroy(self, request, pk=None):
        user = UserService.deactivate_user(request.user, pk)
        return success_response(
            data={'user': UserListSerializer(user).data},
            message='User deactivated successfully'
        )

    # ==================== ACCOUNT ====================

    @action(detail=True, methods=['put'])
    def password(self, request, pk=None):
        """Change the caller's own password."""
        if str(request.user.pk) != str(pk):
            raise ForbiddenException('Access denied. You can only change your own password.')

        serializer = PasswordChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        AuthService().change_password(
            request.user,
            serializer.validated_data['current_password'],
            serializer.validated_data['new_password'],
        )
        return success_response(message='Password updated successfully')

    @action(detail=False, methods=['get'], url_path='analytics/stats')
    def stats(self, request):
        return success_response(data=UserService.get_user_stats())
