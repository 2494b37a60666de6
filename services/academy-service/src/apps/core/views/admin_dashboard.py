# services/academy-service/src/apps/core/views/admin_dashboard.py
"""
Admin ViewSet

Dashboard, student management, analytics and data export. Every endpoint
requires the admin role.
"""

import logging
from rest_framework import viewsets
from rest_framework.decorators import action
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.models import User
from apps.core.serializers import (
    UserSerializer,
    StudentAdminSerializer,
    StudentStatusSerializer,
    EnrollmentDetailSerializer,
)
from apps.core.services import (
    EnrollmentService,
    ReportService,
    UserService,
    UserNotFoundError,
)
from shared.common.permissions import IsAdmin
from shared.common.responses import success_response
from .filters import StudentFilter

logger = logging.getLogger(__name__)


class AdminViewSet(viewsets.GenericViewSet):
    """
    Endpoints:
    - GET /admin/dashboard/
    - GET /admin/students/ - Paginated student table
    - GET /admin/students/{id}/ - Student with enrollments and statistics
    - PUT /admin/students/{id}/status/ - Activate or deactivate a student
    - GET /admin/analytics/
    - GET /admin/export/{type}/ - students, enrollments or courses
    """

    permission_classes = [IsAdmin]
    serializer_class = StudentAdminSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = StudentFilter

    def get_queryset(self):
        return ReportService.students_queryset()

    def _get_student(self, student_id) -> User:
        student = UserService.get_user(student_id)
        if student.user_type != User.UserType.STUDENT:
            raise UserNotFoundError('Student not found.')
        return student

    @action(detail=False, methods=['get'])
    def dashboard(self, request):
        return success_response(data=ReportService.get_dashboard())

    # ==================== STUDENTS ====================

    @action(detail=False, methods=['get'])
    def students(self, request):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = StudentAdminSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @action(detail=False, methods=['get'], url_path=r'students/(?P<student_id>[^/.]+)')
    def student_detail(self, request, student_id=None):
        student = self._get_student(student_id)
        enrollments = EnrollmentService.get_student_enrollments(student)

        return success_response(data={
            'student': UserSerializer(student).data,
            'enrollments': EnrollmentDetailSerializer(
                enrollments, many=True, context={'request': request}
            ).data,
            'statistics': ReportService.get_student_statistics(student),
        })

    @action(detail=False, methods=['put'], url_path=r'students/(?P<student_id>[^/.]+)/status')
    def student_status(self, request, student_id=None):
        serializer = StudentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        student = self._get_student(student_id)
        is_active = serializer.validated_data['is_active']
        student = UserService.set_active(request.user, student, is_active)

        state = 'activated' if is_active else 'deactivated'
        return success_response(
            data={'student': UserSerializer(student).data},
            message=f'Student {state} successfully'
        )

    # ==================== REPORTING ====================

    @action(detail=False, methods=['get'])
    def analytics(self, request):
        return success_response(data=ReportService.get_analytics())

    @action(detail=False, methods=['get'], url_path=r'export/(?P<export_type>[^/.]+)')
    def export(self, request, export_type=None):
        rows = ReportService.export(export_type)
        return success_response(data={
            'type': export_type,
            'count': len(rows),
            'records': rows,
        })
