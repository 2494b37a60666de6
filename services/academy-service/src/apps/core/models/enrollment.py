# services/academy-service/src/apps/core/models/enrollment.py
"""
Enrollment models.

An Enrollment references (does not own) a student and a course. Its payment
schedule and notes are stored as ordered child rows.
"""

import uuid
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone


def default_flight_hours():
    return {
        'total': 0,
        'solo': 0,
        'dual_instruction': 0,
        'cross_country': 0,
        'night_flying': 0,
        'instrument_time': 0,
    }


class Enrollment(models.Model):
    """
    A student's enrollment in a course.
    """

    class Status(models.TextChoices):
        ENROLLED = 'enrolled', 'Enrolled'
        IN_PROGRESS = 'in-progress', 'In Progress'
        COMPLETED = 'completed', 'Completed'
        DROPPED = 'dropped', 'Dropped'
        SUSPENDED = 'suspended', 'Suspended'

    class PaymentMode(models.TextChoices):
        CREDIT_CARD = 'Credit Card', 'Credit Card'
        DEBIT_CARD = 'Debit Card', 'Debit Card'
        BANK_TRANSFER = 'Bank Transfer', 'Bank Transfer'
        CHECK = 'Check', 'Check'
        CASH = 'Cash', 'Cash'

    class InstallmentPlan(models.TextChoices):
        DIRECT = 'Direct Payment', 'Direct Payment'
        THREE_MONTHS = 'Within 3 months', 'Within 3 months'
        SIX_MONTHS = 'Within 6 months', 'Within 6 months'
        EIGHT_MONTHS = 'Within 8 months', 'Within 8 months'

    class PaymentStatus(models.TextChoices):
        PENDING = 'pending', 'Pending'
        PARTIAL = 'partial', 'Partial'
        PAID = 'paid', 'Paid'
        OVERDUE = 'overdue', 'Overdue'

    class Grade(models.TextChoices):
        A = 'A', 'A'
        B = 'B', 'B'
        C = 'C', 'C'
        D = 'D', 'D'
        F = 'F', 'F'
        PASS = 'Pass', 'Pass'
        FAIL = 'Fail', 'Fail'

    # Statuses that hold a seat and block course deactivation
    ACTIVE_STATUSES = (Status.ENROLLED, Status.IN_PROGRESS)

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='enrollments'
    )
    course = models.ForeignKey(
        'core.Course',
        on_delete=models.PROTECT,
        related_name='enrollments'
    )
    enrollment_date = models.DateTimeField(default=timezone.now, db_index=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ENROLLED,
        db_index=True
    )

    # Payment
    payment_mode = models.CharField(max_length=20, choices=PaymentMode.choices)
    installments = models.CharField(max_length=20, choices=InstallmentPlan.choices)
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))]
    )
    amount_paid = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True
    )

    # Academic record
    start_date = models.DateTimeField(default=timezone.now)
    expected_completion_date = models.DateTimeField(blank=True, null=True)
    actual_completion_date = models.DateTimeField(blank=True, null=True)
    instructor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='instructed_enrollments'
    )
    aircraft_log = models.JSONField(default=list, blank=True)

    # Progress
    overall_progress = models.PositiveSmallIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    modules_completed = models.JSONField(default=list, blank=True)
    flight_hours = models.JSONField(default=default_flight_hours, blank=True)
    exam_results = models.JSONField(default=list, blank=True)

    # Sessions and documents
    sessions = models.JSONField(default=list, blank=True)
    documents = models.JSONField(default=list, blank=True)

    # Completion
    is_completed = models.BooleanField(default=False)
    completion_date = models.DateTimeField(blank=True, null=True)
    final_grade = models.CharField(max_length=4, choices=Grade.choices, blank=True, default='')
    certificate_issued = models.BooleanField(default=False)
    certificate_number = models.CharField(max_length=100, blank=True, default='')
    certificate_issue_date = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'enrollments'
        ordering = ['-enrollment_date']
        indexes = [
            models.Index(fields=['student', 'status']),
            models.Index(fields=['course', 'status']),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'course'],
                name='unique_student_course_enrollment'
            ),
            models.CheckConstraint(
                condition=models.Q(overall_progress__gte=0) & models.Q(overall_progress__lte=100),
                name='enrollment_progress_range'
            ),
        ]

    def __str__(self):
        return f"{self.student_id} - {self.course_id} ({self.status})"

    def save(self, *args, **kwargs):
        if self.expected_completion_date is None and self.start_date:
            self.expected_completion_date = self.start_date + timedelta(days=365)
        super().save(*args, **kwargs)

    @property
    def is_active(self) -> bool:
        return self.status in self.ACTIVE_STATUSES

    @property
    def payment_progress(self) -> float:
        if not self.total_amount:
            return 0.0
        return round(float(self.amount_paid) / float(self.total_amount) * 100, 2)

    @property
    def pending_amount(self) -> Decimal:
        return max(self.total_amount - self.amount_paid, Decimal('0.00'))

    @property
    def days_since_enrollment(self) -> int:
        return (timezone.now() - self.enrollment_date).days


class PaymentInstallment(models.Model):
    """
    One entry of an enrollment's installment schedule.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        PAID = 'paid', 'Paid'
        OVERDUE = 'overdue', 'Overdue'

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    enrollment = models.ForeignKey(
        Enrollment,
        on_delete=models.CASCADE,
        related_name='payment_schedule'
    )
    sequence = models.PositiveSmallIntegerField()
    due_date = models.DateTimeField()
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING
    )
    paid_date = models.DateTimeField(blank=True, null=True)
    transaction_id = models.CharField(max_length=100, blank=True, default='')

    class Meta:
        db_table = 'enrollment_payment_installments'
        ordering = ['enrollment', 'sequence']
        constraints = [
            models.UniqueConstraint(
                fields=['enrollment', 'sequence'],
                name='unique_installment_sequence'
            ),
        ]

    def __str__(self):
        return f"Installment {self.sequence} of {self.enrollment_id}: {self.amount} ({self.status})"


class EnrollmentNote(models.Model):
    """
    Timestamped note attached to an enrollment by an administrator.
    """

    class NoteType(models.TextChoices):
        ACADEMIC = 'academic', 'Academic'
        ADMINISTRATIVE = 'administrative', 'Administrative'
        DISCIPLINARY = 'disciplinary', 'Disciplinary'
        MEDICAL = 'medical', 'Medical'

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    enrollment = models.ForeignKey(
        Enrollment,
        on_delete=models.CASCADE,
        related_name='notes'
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='enrollment_notes'
    )
    note_type = models.CharField(
        max_length=20,
        choices=NoteType.choices,
        default=NoteType.ACADEMIC
    )
    content = models.TextField()
    is_private = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'enrollment_notes'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.note_type} note on {self.enrollment_id}"
