# services/academy-service/src/apps/core/services/enrollment_service.py
"""
Enrollment Service

Business logic for enrollments:
- Enrolling a student with seat reservation and installment schedule
- Posting payments
- Recording progress and completing the course
- Status transitions and administrative notes
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from dateutil.relativedelta import relativedelta
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from apps.core.models import Course, Enrollment, EnrollmentNote, PaymentInstallment, User
from apps.core.services.course_service import CourseService
from shared.common.exceptions import ConflictException, NotFoundException, ValidationException
from shared.common.permissions import Roles, require_owner_or_admin, require_role
from shared.common.utils import merge_dicts, round_decimal

logger = logging.getLogger(__name__)


# ==================== ERRORS ====================

class EnrollmentNotFoundError(NotFoundException):
    default_detail = 'Enrollment not found.'
    error_code = 'ENROLLMENT_NOT_FOUND'


class CourseUnavailableError(ValidationException):
    default_detail = 'Course is not available for enrollment.'
    error_code = 'COURSE_UNAVAILABLE'


class CourseFullError(ConflictException):
    default_detail = 'Course is full.'
    error_code = 'COURSE_FULL'


class DuplicateEnrollmentError(ConflictException):
    default_detail = 'You are already enrolled in this course.'
    error_code = 'DUPLICATE_ENROLLMENT'


class InvalidAmountError(ValidationException):
    default_detail = 'Payment amount must be greater than 0.'
    error_code = 'INVALID_AMOUNT'


class InvalidStatusTransitionError(ValidationException):
    default_detail = 'Invalid status transition.'
    error_code = 'INVALID_STATUS_TRANSITION'


# ==================== SCHEDULE ====================

INSTALLMENT_COUNTS = {
    Enrollment.InstallmentPlan.DIRECT: 0,
    Enrollment.InstallmentPlan.THREE_MONTHS: 3,
    Enrollment.InstallmentPlan.SIX_MONTHS: 6,
    Enrollment.InstallmentPlan.EIGHT_MONTHS: 8,
}


def build_installment_schedule(
    total_amount: Decimal,
    plan: str,
    start: datetime
) -> List[Dict]:
    """
    Split ``total_amount`` evenly across the plan's monthly due dates,
    the first one month after ``start``. Amounts are rounded to cents and
    the last entry takes the remainder so the entries sum to the total.
    Direct payment has no schedule.
    """
    count = INSTALLMENT_COUNTS.get(plan, 0)
    if not count:
        return []

    total_amount = round_decimal(total_amount)
    share = round_decimal(total_amount / count)

    schedule = []
    for i in range(count):
        amount = share if i < count - 1 else total_amount - share * (count - 1)
        schedule.append({
            'sequence': i + 1,
            'due_date': start + relativedelta(months=i + 1),
            'amount': amount,
            'status': PaymentInstallment.Status.PENDING,
        })
    return schedule


# Allowed status changes; completed and dropped are terminal
STATUS_TRANSITIONS = {
    Enrollment.Status.ENROLLED: {
        Enrollment.Status.IN_PROGRESS,
        Enrollment.Status.COMPLETED,
        Enrollment.Status.DROPPED,
        Enrollment.Status.SUSPENDED,
    },
    Enrollment.Status.IN_PROGRESS: {
        Enrollment.Status.COMPLETED,
        Enrollment.Status.DROPPED,
        Enrollment.Status.SUSPENDED,
    },
    Enrollment.Status.SUSPENDED: {
        Enrollment.Status.ENROLLED,
        Enrollment.Status.IN_PROGRESS,
        Enrollment.Status.DROPPED,
    },
    Enrollment.Status.COMPLETED: set(),
    Enrollment.Status.DROPPED: set(),
}


class EnrollmentService:
    """Service for enrollment operations"""

    PROGRESS_FIELDS = ('overall_progress', 'modules_completed', 'flight_hours', 'exam_results')

    @staticmethod
    def get_enrollment(enrollment_id: Any) -> Enrollment:
        try:
            return (
                Enrollment.objects
                .select_related('student', 'course')
                .get(pk=enrollment_id)
            )
        except (Enrollment.DoesNotExist, ValueError, DjangoValidationError):
            raise EnrollmentNotFoundError()

    @staticmethod
    def get_enrollment_for(actor: User, enrollment_id: Any) -> Enrollment:
        enrollment = EnrollmentService.get_enrollment(enrollment_id)
        require_owner_or_admin(actor, enrollment.student_id)
        return enrollment

    @staticmethod
    def _lock(enrollment_id: Any) -> Enrollment:
        EnrollmentService.get_enrollment(enrollment_id)
        return Enrollment.objects.select_for_update().get(pk=enrollment_id)

    # ==================== ENROLL ====================

    @staticmethod
    def create_enrollment(
        student: User,
        course_id: Any,
        payment_mode: str,
        installments: str,
        gender: Optional[str] = None
    ) -> Enrollment:
        """
        Enroll ``student`` in a course.

        The seat is taken with a single conditional UPDATE inside the same
        transaction as the insert, so a full course rolls the enrollment back.

        Raises:
            CourseNotFoundError, CourseUnavailableError, CourseFullError,
            DuplicateEnrollmentError
        """
        require_role(student, Roles.STUDENT)
        course = CourseService.get_course(course_id)

        if course.status != Course.Status.ACTIVE:
            raise CourseUnavailableError()

        if course.is_full:
            raise CourseFullError()

        if Enrollment.objects.filter(student=student, course=course).exists():
            raise DuplicateEnrollmentError()

        try:
            with transaction.atomic():
                now = timezone.now()
                enrollment = Enrollment.objects.create(
                    student=student,
                    course=course,
                    enrollment_date=now,
                    start_date=now,
                    payment_mode=payment_mode,
                    installments=installments,
                    total_amount=course.price_numeric,
                    payment_status=Enrollment.PaymentStatus.PENDING,
                )

                PaymentInstallment.objects.bulk_create([
                    PaymentInstallment(enrollment=enrollment, **entry)
                    for entry in build_installment_schedule(course.price_numeric, installments, now)
                ])

                reserved = Course.objects.filter(
                    pk=course.pk,
                    status=Course.Status.ACTIVE,
                    current_enrollments__lt=F('max_students')
                ).update(current_enrollments=F('current_enrollments') + 1)

                if not reserved:
                    raise CourseFullError()

                if gender and gender != student.gender:
                    student.gender = gender
                    student.save(update_fields=['gender', 'updated_at'])
        except IntegrityError:
            raise DuplicateEnrollmentError()
        except CourseFullError:
            logger.warning(f"Enrollment rejected, course full: {course.id} student {student.id}")
            raise

        logger.info(
            f"Enrollment created: {student.email} -> {course.title}",
            extra={
                'enrollment_id': str(enrollment.id),
                'course_id': str(course.id),
                'student_id': str(student.id),
                'installments': installments,
            }
        )
        return EnrollmentService.get_enrollment(enrollment.pk)

    # ==================== PAYMENT ====================

    @staticmethod
    @transaction.atomic
    def apply_payment(
        enrollment_id: Any,
        amount: Decimal,
        transaction_id: Optional[str] = None
    ) -> Enrollment:
        """
        Post a payment.

        The amount is added to ``amount_paid``. It then settles the first
        pending installment whose amount it covers; any remainder is not
        carried to later installments.
        """
        amount = Decimal(str(amount)) if amount is not None else None
        if amount is None or amount <= 0:
            raise InvalidAmountError()

        enrollment = EnrollmentService._lock(enrollment_id)
        now = timezone.now()

        enrollment.amount_paid = enrollment.amount_paid + amount
        if enrollment.amount_paid >= enrollment.total_amount:
            enrollment.payment_status = Enrollment.PaymentStatus.PAID
        elif enrollment.amount_paid > 0:
            enrollment.payment_status = Enrollment.PaymentStatus.PARTIAL
        enrollment.save(update_fields=['amount_paid', 'payment_status', 'updated_at'])

        installment = (
            enrollment.payment_schedule
            .filter(status=PaymentInstallment.Status.PENDING, amount__lte=amount)
            .order_by('sequence')
            .first()
        )
        if installment:
            installment.status = PaymentInstallment.Status.PAID
            installment.paid_date = now
            installment.transaction_id = transaction_id or ''
            installment.save(update_fields=['status', 'paid_date', 'transaction_id'])

        logger.info(
            f"Payment posted: {amount} on enrollment {enrollment.id}",
            extra={
                'enrollment_id': str(enrollment.id),
                'amount': str(amount),
                'transaction_id': transaction_id,
                'payment_status': enrollment.payment_status,
                'installment': installment.sequence if installment else None,
            }
        )
        return EnrollmentService.get_enrollment(enrollment.pk)

    # ==================== PROGRESS ====================

    @staticmethod
    @transaction.atomic
    def update_progress(enrollment_id: Any, progress: Dict) -> Enrollment:
        """
        Merge a progress patch. Reaching 100% completes the enrollment when
        its current status may move to completed; suspended and dropped
        enrollments only record the progress.
        ``flight_hours`` is merged key by key; the other fields replace.
        """
        enrollment = EnrollmentService._lock(enrollment_id)

        if 'overall_progress' in progress:
            value = progress['overall_progress']
            if value is None or value < 0 or value > 100:
                raise ValidationException(
                    'Overall progress must be between 0 and 100.',
                    errors={'overall_progress': ['Must be between 0 and 100.']}
                )
            enrollment.overall_progress = value
        if 'modules_completed' in progress:
            enrollment.modules_completed = progress['modules_completed']
        if 'flight_hours' in progress:
            enrollment.flight_hours = merge_dicts(enrollment.flight_hours, progress['flight_hours'])
        if 'exam_results' in progress:
            enrollment.exam_results = progress['exam_results']

        completable = Enrollment.Status.COMPLETED in STATUS_TRANSITIONS.get(enrollment.status, ())
        if enrollment.overall_progress >= 100 and completable and not enrollment.is_completed:
            EnrollmentService._mark_completed(enrollment)
            logger.info(f"Enrollment completed: {enrollment.id}")

        enrollment.save()
        return EnrollmentService.get_enrollment(enrollment.pk)

    @staticmethod
    def _mark_completed(enrollment: Enrollment) -> None:
        now = timezone.now()
        enrollment.is_completed = True
        enrollment.completion_date = now
        enrollment.actual_completion_date = now
        enrollment.status = Enrollment.Status.COMPLETED

    # ==================== STATUS ====================

    @staticmethod
    @transaction.atomic
    def update_status(enrollment_id: Any, status: str) -> Enrollment:
        if status not in Enrollment.Status.values:
            raise ValidationException(
                f"Invalid status. Must be one of: {', '.join(Enrollment.Status.values)}"
            )

        enrollment = EnrollmentService._lock(enrollment_id)
        previous = enrollment.status

        if status == previous:
            return EnrollmentService.get_enrollment(enrollment.pk)

        if status not in STATUS_TRANSITIONS[previous]:
            raise InvalidStatusTransitionError(
                f"Cannot change enrollment status from '{previous}' to '{status}'."
            )

        if status == Enrollment.Status.COMPLETED:
            EnrollmentService._mark_completed(enrollment)
        else:
            enrollment.status = status
        enrollment.save()

        logger.info(f"Enrollment {enrollment.id} status changed: {previous} -> {status}")
        return EnrollmentService.get_enrollment(enrollment.pk)

    # ==================== NOTES ====================

    @staticmethod
    def add_note(
        enrollment_id: Any,
        author: User,
        content: str,
        note_type: str = EnrollmentNote.NoteType.ACADEMIC,
        is_private: bool = False
    ) -> Enrollment:
        require_role(author, Roles.ADMIN)
        if not content or not content.strip():
            raise ValidationException('Note content is required.')

        enrollment = EnrollmentService.get_enrollment(enrollment_id)
        EnrollmentNote.objects.create(
            enrollment=enrollment,
            author=author,
            content=content.strip(),
            note_type=note_type,
            is_private=is_private,
        )

        logger.info(f"Note added to enrollment {enrollment.id} by {author.email}")
        return EnrollmentService.get_enrollment(enrollment.pk)

    # ==================== QUERIES ====================

    @staticmethod
    def get_student_enrollments(student: User):
        return (
            Enrollment.objects
            .filter(student=student)
            .select_related('course')
            .prefetch_related('payment_schedule')
            .order_by('-enrollment_date')
        )

    @staticmethod
    def search(queryset, term: str):
        return queryset.filter(
            Q(student__first_name__icontains=term) |
            Q(student__last_name__icontains=term) |
            Q(student__email__icontains=term)
        )
