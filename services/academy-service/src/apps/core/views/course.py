# services/academy-service/src/apps/core/views/course.py
"""
Course ViewSet

Public catalog browsing plus admin course management.
"""

import logging
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.models import Course
from apps.core.serializers import (
    CourseListSerializer,
    CourseDetailSerializer,
    CourseWriteSerializer,
)
from apps.core.services import CourseService, CourseNotFoundError
from shared.common.exceptions import ValidationException
from shared.common.permissions import IsAdmin, Roles, has_role
from shared.common.responses import success_response, created_response
from .filters import CourseFilter

logger = logging.getLogger(__name__)


class CourseViewSet(viewsets.GenericViewSet):
    """
    ViewSet for the course catalog.

    Endpoints:
    - GET /courses/ - List courses (public, paginated)
    - GET /courses/{id}/ - Course details (public)
    - POST /courses/ - Create course (admin)
    - PUT /courses/{id}/ - Update course (admin)
    - DELETE /courses/{id}/ - Deactivate course (admin)
    - GET /courses/featured/list/ - Featured courses
    - GET /courses/category/{category}/ - Courses in a category
    - GET /courses/analytics/stats/ - Catalog statistics (admin)
    """

    queryset = Course.objects.all().order_by('-created_at')
    serializer_class = CourseListSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = CourseFilter

    def get_permissions(self):
        if self.action in ['list', 'retrieve', 'featured', 'category']:
            return [AllowAny()]
        return [IsAdmin()]

    def get_serializer_class(self):
        if self.action in ['create', 'update']:
            return CourseWriteSerializer
        if self.action == 'retrieve':
            return CourseDetailSerializer
        return CourseListSerializer

    def _detail(self, course: Course) -> dict:
        return CourseDetailSerializer(
            course,
            context={'active_enrollments': CourseService.count_active_enrollments(course)}
        ).data

    # ==================== CATALOG ====================

    def list(self, request):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = CourseListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request, pk=None):
        course = CourseService.get_course(pk)
        # Inactive and draft courses are only visible to administrators
        if course.status != Course.Status.ACTIVE and not has_role(request.user, Roles.ADMIN):
            raise CourseNotFoundError()
        return success_response(data={'course': self._detail(course)})

    @action(detail=False, methods=['get'], url_path='featured/list')
    def featured(self, request):
        limit = request.query_params.get('limit')
        if limit is not None:
            try:
                limit = int(limit)
            except ValueError:
                raise ValidationException('limit must be an integer.')
            if limit < 1:
                raise ValidationException('limit must be at least 1.')

        courses = CourseService.get_featured_courses(limit)
        return success_response(data={'courses': CourseListSerializer(courses, many=True).data})

    @action(detail=False, methods=['get'], url_path=r'category/(?P<category>[^/.]+)')
    def category(self, request, category=None):
        courses = CourseService.get_courses_by_category(category)
        return success_response(data={
            'category': category,
            'courses': CourseListSerializer(courses, many=True).data,
        })

    # ==================== MANAGEMENT ====================

    def create(self, request):
        serializer = CourseWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        course = CourseService.create_course(request.user, serializer.validated_data)

        return created_response(
            data={'course': self._detail(course)},
            message='Course created successfully'
        )

    def update(self, request, pk=None):
        serializer = CourseWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        course = CourseService.update_course(request.user, pk, serializer.validated_data)

        return success_response(
            data={'course': self._detail(course)},
            message='Course updated successfully'
        )

    def destroy(self, request, pk=None):
        course = CourseService.delete_course(request.user, pk)
        return success_response(
            data={'course': CourseListSerializer(course).data},
            message='Course deactivated successfully'
        )

    @action(detail=False, methods=['get'], url_path='analytics/stats')
    def stats(self, request):
        return success_response(data=CourseService.get_course_stats())
