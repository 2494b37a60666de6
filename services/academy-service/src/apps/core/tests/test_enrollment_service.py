# services/academy-service/src/apps/core/tests/test_enrollment_service.py
"""
Tests for EnrollmentService

Tests the enrollment lifecycle including:
- Seat capacity and duplicate enrollments
- Installment schedules
- Payments, progress, status changes and notes
"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import PropertyMock, patch

from dateutil.relativedelta import relativedelta
from django.utils import timezone

from apps.core.models import Course, Enrollment, EnrollmentNote, PaymentInstallment
from apps.core.services import (
    EnrollmentService,
    EnrollmentNotFoundError,
    CourseNotFoundError,
    CourseUnavailableError,
    CourseFullError,
    DuplicateEnrollmentError,
    InvalidAmountError,
    InvalidStatusTransitionError,
    build_installment_schedule,
)
from shared.common.exceptions import ForbiddenException, ValidationException


pytestmark = pytest.mark.django_db

DIRECT = Enrollment.InstallmentPlan.DIRECT
SIX_MONTHS = Enrollment.InstallmentPlan.SIX_MONTHS
CARD = Enrollment.PaymentMode.CREDIT_CARD


@pytest.fixture
def enroll():
    def _enroll(student, course, installments=DIRECT, payment_mode=CARD, **kwargs):
        return EnrollmentService.create_enrollment(
            student, course.id, payment_mode, installments, **kwargs
        )
    return _enroll


@pytest.fixture
def enrollment(enroll, student_user, course):
    return enroll(student_user, course, installments=SIX_MONTHS)


class TestInstallmentSchedule:

    def test_six_month_plan(self):
        start = timezone.make_aware(datetime(2024, 1, 31, 10, 0))

        schedule = build_installment_schedule(Decimal('12000'), SIX_MONTHS, start)

        assert len(schedule) == 6
        assert all(entry['amount'] == Decimal('2000.00') for entry in schedule)
        assert [entry['sequence'] for entry in schedule] == [1, 2, 3, 4, 5, 6]
        assert schedule[0]['due_date'] == start + relativedelta(months=1)
        assert schedule[5]['due_date'] == start + relativedelta(months=6)
        assert all(entry['status'] == PaymentInstallment.Status.PENDING for entry in schedule)

    def test_uneven_total_sums_exactly(self):
        schedule = build_installment_schedule(
            Decimal('1000'), Enrollment.InstallmentPlan.THREE_MONTHS, timezone.now()
        )

        assert [entry['amount'] for entry in schedule] == [
            Decimal('333.33'), Decimal('333.33'), Decimal('333.34')
        ]
        assert sum(entry['amount'] for entry in schedule) == Decimal('1000.00')

    def test_eight_month_plan(self):
        schedule = build_installment_schedule(
            Decimal('8000'), Enrollment.InstallmentPlan.EIGHT_MONTHS, timezone.now()
        )
        assert len(schedule) == 8

    def test_direct_payment_has_no_schedule(self):
        assert build_installment_schedule(Decimal('12000'), DIRECT, timezone.now()) == []


class TestCreateEnrollment:

    def test_enroll_success(self, enroll, student_user, course):
        enrollment = enroll(student_user, course, installments=SIX_MONTHS)

        assert enrollment.status == Enrollment.Status.ENROLLED
        assert enrollment.total_amount == Decimal('12000.00')
        assert enrollment.amount_paid == Decimal('0.00')
        assert enrollment.payment_status == Enrollment.PaymentStatus.PENDING

        schedule = list(enrollment.payment_schedule.order_by('sequence'))
        assert len(schedule) == 6
        assert all(entry.amount == Decimal('2000.00') for entry in schedule)
        for i, entry in enumerate(schedule):
            assert entry.due_date == enrollment.start_date + relativedelta(months=i + 1)

        course.refresh_from_db()
        assert course.current_enrollments == 1

    def test_expected_completion_one_year_out(self, enrollment):
        delta = enrollment.expected_completion_date - enrollment.start_date
        assert delta.days == 365

    def test_gender_updates_profile(self, enroll, student_user, course):
        enroll(student_user, course, gender='female')

        student_user.refresh_from_db()
        assert student_user.gender == 'female'

    def test_admin_cannot_enroll(self, enroll, admin_user, course):
        with pytest.raises(ForbiddenException):
            enroll(admin_user, course)

    def test_unknown_course(self, student_user):
        with pytest.raises(CourseNotFoundError):
            EnrollmentService.create_enrollment(
                student_user, '00000000-0000-0000-0000-000000000000', CARD, DIRECT
            )

    def test_inactive_course(self, enroll, student_user, create_course):
        course = create_course(status=Course.Status.INACTIVE)

        with pytest.raises(CourseUnavailableError):
            enroll(student_user, course)

    def test_duplicate_enrollment(self, enroll, student_user, course):
        enroll(student_user, course)

        with pytest.raises(DuplicateEnrollmentError):
            enroll(student_user, course)

        assert Enrollment.objects.filter(student=student_user, course=course).count() == 1
        course.refresh_from_db()
        assert course.current_enrollments == 1


class TestCapacity:

    def test_capacity_is_never_exceeded(self, enroll, create_user, create_course):
        course = create_course(max_students=3)
        students = [create_user() for _ in range(4)]

        for student in students[:3]:
            enroll(student, course)

        with pytest.raises(CourseFullError):
            enroll(students[3], course)

        course.refresh_from_db()
        assert course.current_enrollments == 3
        assert course.enrollments.count() == 3

    def test_lost_seat_race_rolls_back_enrollment(self, enroll, student_user, create_course):
        course = create_course(max_students=1)
        # Another request took the last seat after this one read the course
        Course.objects.filter(pk=course.pk).update(current_enrollments=1)

        with patch.object(Course, 'is_full', new_callable=PropertyMock, return_value=False):
            with pytest.raises(CourseFullError):
                enroll(student_user, course, installments=SIX_MONTHS)

        assert not Enrollment.objects.filter(student=student_user).exists()
        assert not PaymentInstallment.objects.exists()
        course.refresh_from_db()
        assert course.current_enrollments == 1


class TestApplyPayment:

    def test_partial_payment_settles_first_installment(self, enrollment):
        enrollment = EnrollmentService.apply_payment(enrollment.id, Decimal('2000'), 'TXN-1')

        assert enrollment.amount_paid == Decimal('2000.00')
        assert enrollment.payment_status == Enrollment.PaymentStatus.PARTIAL

        first, second = enrollment.payment_schedule.order_by('sequence')[:2]
        assert first.status == PaymentInstallment.Status.PAID
        assert first.transaction_id == 'TXN-1'
        assert first.paid_date is not None
        assert second.status == PaymentInstallment.Status.PENDING

    def test_remainder_is_not_rolled_over(self, enrollment):
        enrollment = EnrollmentService.apply_payment(enrollment.id, Decimal('5000'))

        paid = enrollment.payment_schedule.filter(status=PaymentInstallment.Status.PAID)
        assert paid.count() == 1
        assert enrollment.amount_paid == Decimal('5000.00')

    def test_small_payment_settles_no_installment(self, enrollment):
        enrollment = EnrollmentService.apply_payment(enrollment.id, Decimal('500'))

        assert enrollment.payment_status == Enrollment.PaymentStatus.PARTIAL
        assert not enrollment.payment_schedule.filter(status=PaymentInstallment.Status.PAID).exists()

    def test_full_payment(self, enroll, student_user, course):
        enrollment = enroll(student_user, course)

        enrollment = EnrollmentService.apply_payment(enrollment.id, Decimal('12000'))

        assert enrollment.payment_status == Enrollment.PaymentStatus.PAID
        assert enrollment.payment_progress == 100.0

    @pytest.mark.parametrize('amount', [Decimal('0'), Decimal('-10')])
    def test_invalid_amount(self, enrollment, amount):
        with pytest.raises(InvalidAmountError):
            EnrollmentService.apply_payment(enrollment.id, amount)

        enrollment.refresh_from_db()
        assert enrollment.amount_paid == Decimal('0.00')

    def test_unknown_enrollment(self):
        with pytest.raises(EnrollmentNotFoundError):
            EnrollmentService.apply_payment('00000000-0000-0000-0000-000000000000', Decimal('10'))


class TestUpdateProgress:

    def test_partial_progress(self, enrollment):
        enrollment = EnrollmentService.update_progress(enrollment.id, {
            'overall_progress': 40,
            'flight_hours': {'dual_instruction': 12.5, 'solo': 3},
        })

        assert enrollment.overall_progress == 40
        assert enrollment.status == Enrollment.Status.ENROLLED
        assert enrollment.flight_hours['dual_instruction'] == 12.5
        assert enrollment.flight_hours['solo'] == 3
        assert 'cross_country' in enrollment.flight_hours

    def test_flight_hours_are_merged(self, enrollment):
        EnrollmentService.update_progress(enrollment.id, {'flight_hours': {'dual_instruction': 10}})
        enrollment = EnrollmentService.update_progress(enrollment.id, {'flight_hours': {'solo': 2}})

        assert enrollment.flight_hours['dual_instruction'] == 10
        assert enrollment.flight_hours['solo'] == 2

    def test_full_progress_completes_enrollment(self, enrollment):
        assert enrollment.status == Enrollment.Status.ENROLLED

        enrollment = EnrollmentService.update_progress(enrollment.id, {'overall_progress': 100})

        assert enrollment.status == Enrollment.Status.COMPLETED
        assert enrollment.is_completed
        assert enrollment.completion_date is not None

    @pytest.mark.parametrize('held_status', [Enrollment.Status.DROPPED, Enrollment.Status.SUSPENDED])
    def test_full_progress_keeps_held_status(self, enrollment, held_status):
        EnrollmentService.update_status(enrollment.id, held_status)

        enrollment = EnrollmentService.update_progress(enrollment.id, {'overall_progress': 100})

        assert enrollment.overall_progress == 100
        assert enrollment.status == held_status
        assert not enrollment.is_completed
        assert enrollment.completion_date is None

    def test_out_of_range_progress(self, enrollment):
        with pytest.raises(ValidationException):
            EnrollmentService.update_progress(enrollment.id, {'overall_progress': 101})


class TestUpdateStatus:

    def test_allowed_transition(self, enrollment):
        enrollment = EnrollmentService.update_status(enrollment.id, Enrollment.Status.IN_PROGRESS)
        assert enrollment.status == Enrollment.Status.IN_PROGRESS

        enrollment = EnrollmentService.update_status(enrollment.id, Enrollment.Status.SUSPENDED)
        assert enrollment.status == Enrollment.Status.SUSPENDED

        enrollment = EnrollmentService.update_status(enrollment.id, Enrollment.Status.IN_PROGRESS)
        assert enrollment.status == Enrollment.Status.IN_PROGRESS

    def test_completed_is_terminal(self, enrollment):
        enrollment = EnrollmentService.update_status(enrollment.id, Enrollment.Status.COMPLETED)
        assert enrollment.is_completed

        with pytest.raises(InvalidStatusTransitionError):
            EnrollmentService.update_status(enrollment.id, Enrollment.Status.ENROLLED)

    def test_dropped_is_terminal(self, enrollment):
        EnrollmentService.update_status(enrollment.id, Enrollment.Status.DROPPED)

        with pytest.raises(InvalidStatusTransitionError):
            EnrollmentService.update_status(enrollment.id, Enrollment.Status.IN_PROGRESS)

    def test_same_status_is_noop(self, enrollment):
        enrollment = EnrollmentService.update_status(enrollment.id, Enrollment.Status.ENROLLED)
        assert enrollment.status == Enrollment.Status.ENROLLED

    def test_unknown_status(self, enrollment):
        with pytest.raises(ValidationException):
            EnrollmentService.update_status(enrollment.id, 'graduated')


class TestNotes:

    def test_admin_adds_note(self, enrollment, admin_user):
        EnrollmentService.add_note(
            enrollment.id,
            admin_user,
            'Needs more crosswind practice.',
            note_type=EnrollmentNote.NoteType.ACADEMIC,
            is_private=True,
        )

        note = enrollment.notes.get()
        assert note.author == admin_user
        assert note.is_private
        assert note.content == 'Needs more crosswind practice.'

    def test_student_cannot_add_note(self, enrollment, student_user):
        with pytest.raises(ForbiddenException):
            EnrollmentService.add_note(enrollment.id, student_user, 'Hello')

    def test_blank_note(self, enrollment, admin_user):
        with pytest.raises(ValidationException):
            EnrollmentService.add_note(enrollment.id, admin_user, '   ')
