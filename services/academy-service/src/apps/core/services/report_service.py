# services/academy-service/src/apps/core/services/report_service.py
"""
Report Service.

Read-only aggregations over the catalog and enrollments. Every figure is
computed from the database on request.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List

from django.db.models import Count, DecimalField, Prefetch, Q, QuerySet, Sum, Value
from django.db.models.functions import Coalesce, TruncMonth

from apps.core.models import Course, Enrollment, User
from shared.common.exceptions import ValidationException
from shared.common.utils import month_keys, months_back, percentage, start_of_month

logger = logging.getLogger(__name__)

ZERO = Value(Decimal('0.00'), output_field=DecimalField(max_digits=14, decimal_places=2))


def _money(value) -> str:
    return str(value if value is not None else Decimal('0.00'))


def _monthly_series(queryset: QuerySet, date_field: str, months: int, revenue: bool = False) -> List[Dict]:
    """Bucket ``queryset`` by calendar month over the last ``months`` months, oldest first"""
    rows = (
        queryset
        .filter(**{f'{date_field}__gte': months_back(months)})
        .annotate(month=TruncMonth(date_field))
        .values('month')
        .annotate(
            count=Count('id'),
            **({'revenue': Coalesce(Sum('amount_paid'), ZERO)} if revenue else {})
        )
        .order_by('month')
    )
    buckets = {row['month'].strftime('%Y-%m'): row for row in rows}

    series = []
    for key in month_keys(months):
        row = buckets.get(key, {})
        entry = {'month': key, 'count': row.get('count', 0)}
        if revenue:
            entry['revenue'] = _money(row.get('revenue'))
        series.append(entry)
    return series


def _enrollment_summary(enrollment: Enrollment) -> Dict:
    return {
        'id': str(enrollment.id),
        'student_id': str(enrollment.student_id),
        'student_name': enrollment.student.full_name,
        'student_email': enrollment.student.email,
        'course_id': str(enrollment.course_id),
        'course_title': enrollment.course.title,
        'status': enrollment.status,
        'payment_status': enrollment.payment_status,
        'total_amount': _money(enrollment.total_amount),
        'amount_paid': _money(enrollment.amount_paid),
        'enrollment_date': enrollment.enrollment_date.isoformat(),
    }


class ReportService:
    """Service for admin reporting."""

    RECENT_LIMIT = 5
    POPULAR_LIMIT = 5
    LOCATION_LIMIT = 10
    GROWTH_MONTHS = 6
    TREND_MONTHS = 12

    EXPORT_TYPES = ('students', 'enrollments', 'courses')

    # ==================== DISTRIBUTIONS ====================

    @staticmethod
    def payment_status_distribution() -> Dict[str, int]:
        counts = dict(
            Enrollment.objects.values_list('payment_status')
            .annotate(count=Count('id')).order_by()
        )
        return {s: counts.get(s, 0) for s in Enrollment.PaymentStatus.values}

    @staticmethod
    def status_distribution() -> Dict[str, int]:
        counts = dict(
            Enrollment.objects.values_list('status')
            .annotate(count=Count('id')).order_by()
        )
        return {s: counts.get(s, 0) for s in Enrollment.Status.values}

    @staticmethod
    def recent_enrollments(limit: int = None) -> List[Dict]:
        enrollments = (
            Enrollment.objects.select_related('student', 'course')
            .order_by('-enrollment_date')[:limit or ReportService.RECENT_LIMIT]
        )
        return [_enrollment_summary(e) for e in enrollments]

    # ==================== ENROLLMENT STATS ====================

    @staticmethod
    def get_enrollment_stats() -> Dict:
        totals = Enrollment.objects.aggregate(
            total_amount=Coalesce(Sum('total_amount'), ZERO),
            amount_paid=Coalesce(Sum('amount_paid'), ZERO),
        )
        by_status = ReportService.status_distribution()

        return {
            'overview': {
                'total': sum(by_status.values()),
                **by_status,
            },
            'payment_stats': {
                'total_amount': _money(totals['total_amount']),
                'amount_paid': _money(totals['amount_paid']),
                'pending_amount': _money(totals['total_amount'] - totals['amount_paid']),
                'by_payment_status': ReportService.payment_status_distribution(),
            },
            'enrollments_by_month': _monthly_series(
                Enrollment.objects.all(), 'enrollment_date', ReportService.TREND_MONTHS
            ),
            'recent_enrollments': ReportService.recent_enrollments(),
        }

    # ==================== DASHBOARD ====================

    @staticmethod
    def get_dashboard() -> Dict:
        students = User.objects.students()
        revenue = Enrollment.objects.aggregate(
            total=Coalesce(Sum('amount_paid'), ZERO),
            monthly=Coalesce(Sum('amount_paid', filter=Q(enrollment_date__gte=start_of_month())), ZERO),
        )

        popular = (
            Course.objects.filter(status=Course.Status.ACTIVE)
            .annotate(enrollment_count=Count('enrollments'))
            .order_by('-enrollment_count', 'title')[:ReportService.POPULAR_LIMIT]
        )

        return {
            'counts': {
                'total_students': students.count(),
                'active_students': students.filter(is_active=True).count(),
                'total_courses': Course.objects.count(),
                'active_courses': Course.objects.filter(status=Course.Status.ACTIVE).count(),
                'total_enrollments': Enrollment.objects.count(),
                'active_enrollments': Enrollment.objects.filter(
                    status__in=Enrollment.ACTIVE_STATUSES
                ).count(),
                'completed_enrollments': Enrollment.objects.filter(
                    status=Enrollment.Status.COMPLETED
                ).count(),
            },
            'revenue': {
                'total': _money(revenue['total']),
                'monthly': _money(revenue['monthly']),
            },
            'recent_enrollments': ReportService.recent_enrollments(),
            'student_growth': _monthly_series(students, 'created_at', ReportService.GROWTH_MONTHS),
            'popular_courses': [
                {
                    'id': str(course.id),
                    'title': course.title,
                    'category': course.category,
                    'enrollment_count': course.enrollment_count,
                    'max_students': course.max_students,
                }
                for course in popular
            ],
            'payment_stats': ReportService.payment_status_distribution(),
        }

    # ==================== STUDENTS ====================

    @staticmethod
    def students_queryset() -> QuerySet:
        return (
            User.objects.students()
            .annotate(
                total_courses=Count('enrollments', distinct=True),
                active_courses=Count(
                    'enrollments',
                    filter=Q(enrollments__status__in=Enrollment.ACTIVE_STATUSES),
                    distinct=True
                ),
            )
            .prefetch_related(
                Prefetch(
                    'enrollments',
                    queryset=Enrollment.objects.select_related('course').order_by('-enrollment_date')
                )
            )
            .order_by('-created_at')
        )

    @staticmethod
    def get_student_statistics(student: User) -> Dict:
        totals = student.enrollments.aggregate(
            total_course_fees=Coalesce(Sum('total_amount'), ZERO),
            total_paid=Coalesce(Sum('amount_paid'), ZERO),
            total_courses=Count('id'),
            active_courses=Count('id', filter=Q(status__in=Enrollment.ACTIVE_STATUSES)),
            completed_courses=Count('id', filter=Q(status=Enrollment.Status.COMPLETED)),
        )
        return {
            'total_courses': totals['total_courses'],
            'active_courses': totals['active_courses'],
            'completed_courses': totals['completed_courses'],
            'total_course_fees': _money(totals['total_course_fees']),
            'total_paid': _money(totals['total_paid']),
            'pending_amount': _money(totals['total_course_fees'] - totals['total_paid']),
        }

    # ==================== ANALYTICS ====================

    @staticmethod
    def get_analytics() -> Dict:
        completion = (
            Course.objects
            .annotate(
                total_enrollments=Count('enrollments'),
                completed_enrollments=Count(
                    'enrollments', filter=Q(enrollments__status=Enrollment.Status.COMPLETED)
                ),
            )
            .filter(total_enrollments__gt=0)
            .order_by('title')
        )

        payments = (
            Enrollment.objects.values('payment_mode')
            .annotate(
                count=Count('id'),
                total_amount=Coalesce(Sum('total_amount'), ZERO),
                amount_paid=Coalesce(Sum('amount_paid'), ZERO),
            )
            .order_by('-count', 'payment_mode')
        )

        locations = (
            User.objects.students()
            .exclude(address_state='')
            .values('address_state')
            .annotate(count=Count('id'))
            .order_by('-count', 'address_state')[:ReportService.LOCATION_LIMIT]
        )

        return {
            'enrollment_trends': _monthly_series(
                Enrollment.objects.all(), 'enrollment_date', ReportService.TREND_MONTHS, revenue=True
            ),
            'completion_rates': [
                {
                    'course_id': str(course.id),
                    'course_title': course.title,
                    'total_enrollments': course.total_enrollments,
                    'completed_enrollments': course.completed_enrollments,
                    'completion_rate': percentage(course.completed_enrollments, course.total_enrollments),
                }
                for course in completion
            ],
            'payment_analytics': [
                {
                    'payment_mode': row['payment_mode'],
                    'count': row['count'],
                    'total_amount': _money(row['total_amount']),
                    'amount_paid': _money(row['amount_paid']),
                }
                for row in payments
            ],
            'students_by_location': [
                {'state': row['address_state'], 'count': row['count']}
                for row in locations
            ],
        }

    # ==================== EXPORT ====================

    @staticmethod
    def export(export_type: str) -> List[Dict[str, Any]]:
        if export_type not in ReportService.EXPORT_TYPES:
            raise ValidationException(
                f"Invalid export type. Must be one of: {', '.join(ReportService.EXPORT_TYPES)}"
            )

        rows = getattr(ReportService, f'_export_{export_type}')()
        logger.info(f"Export generated: {export_type} ({len(rows)} rows)")
        return rows

    @staticmethod
    def _export_students() -> List[Dict]:
        return [
            {
                'id': str(user.id),
                'first_name': user.first_name,
                'last_name': user.last_name,
                'email': user.email,
                'phone': user.phone,
                'gender': user.gender,
                'address_city': user.address_city,
                'address_state': user.address_state,
                'flight_hours': str(user.flight_hours),
                'certificates': user.certificates,
                'is_active': user.is_active,
                'created_at': user.created_at.isoformat(),
            }
            for user in User.objects.students().order_by('last_name', 'first_name')
        ]

    @staticmethod
    def _export_enrollments() -> List[Dict]:
        enrollments = Enrollment.objects.select_related('student', 'course').order_by('-enrollment_date')
        rows = []
        for enrollment in enrollments:
            row = _enrollment_summary(enrollment)
            row.update({
                'payment_mode': enrollment.payment_mode,
                'installments': enrollment.installments,
                'overall_progress': enrollment.overall_progress,
            })
            rows.append(row)
        return rows

    @staticmethod
    def _export_courses() -> List[Dict]:
        return [
            {
                'id': str(course.id),
                'title': course.title,
                'category': course.category,
                'level': course.level,
                'status': course.status,
                'duration': course.duration,
                'price': course.price,
                'price_numeric': _money(course.price_numeric),
                'max_students': course.max_students,
                'current_enrollments': course.current_enrollments,
                'featured': course.featured,
                'created_at': course.created_at.isoformat(),
            }
            for course in Course.objects.order_by('title')
        ]
