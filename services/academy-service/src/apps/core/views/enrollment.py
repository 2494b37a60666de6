# services/academy-service/src/apps/core/views/enrollment.py
"""
Enrollment ViewSet

Students enroll and follow their own enrollments; administrators manage
progress, payments, status and notes.
"""

import logging
from rest_framework import viewsets, filters
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.models import Enrollment
from apps.core.serializers import (
    EnrollmentListSerializer,
    EnrollmentDetailSerializer,
    EnrollmentCreateSerializer,
    ProgressUpdateSerializer,
    PaymentSerializer,
    StatusUpdateSerializer,
    NoteCreateSerializer,
)
from apps.core.services import EnrollmentService, ReportService
from shared.common.permissions import IsAdmin, IsStudent
from shared.common.responses import success_response, created_response
from .filters import EnrollmentFilter

logger = logging.getLogger(__name__)


class EnrollmentViewSet(viewsets.GenericViewSet):
    """
    ViewSet for enrollments.

    Endpoints:
    - POST /enrollments/ - Enroll in a course (student)
    - GET /enrollments/my/ - Own enrollments (student)
    - GET /enrollments/ - List enrollments (admin, paginated)
    - GET /enrollments/{id}/ - Enrollment details (owner or admin)
    - PUT /enrollments/{id}/progress/ - Update progress (admin)
    - POST /enrollments/{id}/payment/ - Post a payment (admin)
    - PUT /enrollments/{id}/status/ - Change status (admin)
    - POST /enrollments/{id}/notes/ - Add a note (admin)
    - GET /enrollments/analytics/stats/ - Enrollment statistics (admin)
    """

    queryset = (
        Enrollment.objects
        .select_related('student', 'course')
        .order_by('-enrollment_date')
    )
    serializer_class = EnrollmentListSerializer
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = EnrollmentFilter
    ordering_fields = ['enrollment_date', 'overall_progress', 'amount_paid', 'status']

    def get_permissions(self):
        if self.action in ['create', 'my']:
            return [IsStudent()]
        if self.action == 'retrieve':
            return [IsAuthenticated()]
        return [IsAdmin()]

    def get_serializer_class(self):
        serializers_by_action = {
            'create': EnrollmentCreateSerializer,
            'update_progress': ProgressUpdateSerializer,
            'record_payment': PaymentSerializer,
            'update_status': StatusUpdateSerializer,
            'add_note': NoteCreateSerializer,
            'retrieve': EnrollmentDetailSerializer,
            'my': EnrollmentDetailSerializer,
        }
        return serializers_by_action.get(self.action, EnrollmentListSerializer)

    def _detail(self, enrollment: Enrollment) -> dict:
        return EnrollmentDetailSerializer(enrollment, context={'request': self.request}).data

    # ==================== STUDENT ====================

    def create(self, request):
        serializer = EnrollmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        enrollment = EnrollmentService.create_enrollment(
            student=request.user,
            course_id=serializer.validated_data['course_id'],
            payment_mode=serializer.validated_data['payment_mode'],
            installments=serializer.validated_data['installments'],
            gender=serializer.validated_data.get('gender'),
        )

        return created_response(
            data={'enrollment': self._detail(enrollment)},
            message='Successfully enrolled in course'
        )

    @action(detail=False, methods=['get'])
    def my(self, request):
        enrollments = EnrollmentService.get_student_enrollments(request.user)
        serializer = EnrollmentDetailSerializer(
            enrollments, many=True, context={'request': request}
        )
        return success_response(data={'enrollments': serializer.data})

    # ==================== READ ====================

    def list(self, request):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = EnrollmentListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request, pk=None):
        enrollment = EnrollmentService.get_enrollment_for(request.user, pk)
        return success_response(data={'enrollment': self._detail(enrollment)})

    # ==================== ADMIN ====================

    @action(detail=True, methods=['put'], url_path='progress')
    def update_progress(self, request, pk=None):
        serializer = ProgressUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        enrollment = EnrollmentService.update_progress(pk, dict(serializer.validated_data))

        return success_response(
            data={'enrollment': self._detail(enrollment)},
            message='Progress updated successfully'
        )

    @action(detail=True, methods=['post'], url_path='payment')
    def record_payment(self, request, pk=None):
        serializer = PaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        enrollment = EnrollmentService.apply_payment(
            pk,
            serializer.validated_data['amount'],
            serializer.validated_data.get('transaction_id'),
        )

        return success_response(
            data={'enrollment': self._detail(enrollment)},
            message='Payment recorded successfully'
        )

    @action(detail=True, methods=['put'], url_path='status')
    def update_status(self, request, pk=None):
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        enrollment = EnrollmentService.update_status(pk, serializer.validated_data['status'])

        return success_response(
            data={'enrollment': self._detail(enrollment)},
            message='Enrollment status updated successfully'
        )

    @action(detail=True, methods=['post'], url_path='notes')
    def add_note(self, request, pk=None):
        serializer = NoteCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        enrollment = EnrollmentService.add_note(
            pk,
            author=request.user,
            content=serializer.validated_data['content'],
            note_type=serializer.validated_data['note_type'],
            is_private=serializer.validated_data['is_private'],
        )

        return success_response(
            data={'enrollment': self._detail(enrollment)},
            message='Note added successfully'
        )

    @action(detail=False, methods=['get'], url_path='analytics/stats')
    def stats(self, request):
        return success_response(data=ReportService.get_enrollment_stats())
