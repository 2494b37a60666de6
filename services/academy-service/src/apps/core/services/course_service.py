# services/academy-service/src/apps/core/services/course_service.py
"""
Course Service

Catalog maintenance: create, update, soft delete, listings and statistics.
"""

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Count, Q

from apps.core.models import Course, Enrollment, User
from shared.common.exceptions import ConflictException, NotFoundException, ValidationException

logger = logging.getLogger(__name__)


class CourseNotFoundError(NotFoundException):
    default_detail = 'Course not found.'
    error_code = 'COURSE_NOT_FOUND'


class CourseHasActiveEnrollmentsError(ConflictException):
    default_detail = 'Cannot delete course with active enrollments.'
    error_code = 'COURSE_HAS_ACTIVE_ENROLLMENTS'


PRICE_FORMATTING = re.compile(r'[$,\s]')


def parse_price(display_price: str) -> Optional[Decimal]:
    """
    Numeric value of a display price such as ``"$8,500"``.

    Returns None when the string is not a non-negative number once currency
    symbols and thousands separators are removed.
    """
    if display_price is None:
        return None
    try:
        value = Decimal(PRICE_FORMATTING.sub('', str(display_price)))
    except InvalidOperation:
        return None
    if not value.is_finite() or value < 0:
        return None
    return value.quantize(Decimal('0.01'))


class CourseService:
    """Service for course catalog operations"""

    UPDATABLE_FIELDS = (
        'title', 'description', 'duration', 'price', 'status', 'category', 'level',
        'featured', 'tags', 'image', 'prerequisites', 'curriculum',
        'instructor_requirements', 'aircraft_requirements', 'materials',
        'exam_requirements', 'certification_details', 'estimated_completion_time',
        'max_students',
    )

    FEATURED_LIMIT = 6
    POPULAR_LIMIT = 5

    @staticmethod
    def get_course(course_id: Any) -> Course:
        try:
            return Course.objects.get(pk=course_id)
        except (Course.DoesNotExist, ValueError, DjangoValidationError):
            raise CourseNotFoundError()

    @staticmethod
    def count_active_enrollments(course: Course) -> int:
        return course.enrollments.filter(status__in=Enrollment.ACTIVE_STATUSES).count()

    @staticmethod
    @transaction.atomic
    def create_course(actor: User, data: Dict) -> Course:
        price_numeric = parse_price(data.get('price'))
        if price_numeric is None:
            raise ValidationException(
                'Price must be a valid non-negative amount.',
                errors={'price': ['Price must be a valid non-negative amount.']}
            )

        fields = {k: v for k, v in data.items() if k in CourseService.UPDATABLE_FIELDS}
        course = Course.objects.create(
            price_numeric=price_numeric,
            created_by=actor,
            last_modified_by=actor,
            **fields
        )

        logger.info(
            f"Course created: {course.title}",
            extra={'course_id': str(course.id), 'created_by': str(actor.id)}
        )
        return course

    @staticmethod
    @transaction.atomic
    def update_course(actor: User, course_id: Any, data: Dict) -> Course:
        """
        Apply an admin edit. A changed display price re-derives
        ``price_numeric``; an unparseable price leaves it untouched.
        """
        course = CourseService.get_course(course_id)
        course = Course.objects.select_for_update().get(pk=course.pk)

        if 'max_students' in data and data['max_students'] < course.current_enrollments:
            raise ValidationException(
                'Capacity cannot be lower than the current number of enrollments.',
                errors={'max_students': [f"Must be at least {course.current_enrollments}."]}
            )

        deactivating = data.get('status') == Course.Status.INACTIVE and course.status != Course.Status.INACTIVE
        if deactivating and CourseService.count_active_enrollments(course):
            raise CourseHasActiveEnrollmentsError()

        for field in CourseService.UPDATABLE_FIELDS:
            if field in data:
                setattr(course, field, data[field])

        if 'price' in data:
            price_numeric = parse_price(data['price'])
            if price_numeric is not None:
                course.price_numeric = price_numeric
            else:
                logger.warning(
                    f"Unparseable price '{data['price']}' for course {course.id}, numeric price kept"
                )

        course.last_modified_by = actor
        course.save()

        logger.info(
            f"Course updated: {course.title}",
            extra={'course_id': str(course.id), 'modified_by': str(actor.id)}
        )
        return course

    @staticmethod
    @transaction.atomic
    def delete_course(actor: User, course_id: Any) -> Course:
        """Soft delete: the course becomes inactive"""
        course = CourseService.get_course(course_id)

        if CourseService.count_active_enrollments(course):
            raise CourseHasActiveEnrollmentsError()

        course.status = Course.Status.INACTIVE
        course.last_modified_by = actor
        course.save(update_fields=['status', 'last_modified_by', 'updated_at'])

        logger.info(
            f"Course deactivated: {course.title}",
            extra={'course_id': str(course.id), 'modified_by': str(actor.id)}
        )
        return course

    # ==================== QUERIES ====================

    @staticmethod
    def search(queryset, term: str):
        return queryset.filter(
            Q(title__icontains=term) |
            Q(description__icontains=term) |
            Q(tags__icontains=term)
        )

    @staticmethod
    def get_featured_courses(limit: Optional[int] = None) -> List[Course]:
        limit = limit or CourseService.FEATURED_LIMIT
        return list(
            Course.objects.filter(status=Course.Status.ACTIVE, featured=True)
            .order_by('-created_at')[:limit]
        )

    @staticmethod
    def get_courses_by_category(category: str) -> List[Course]:
        if category not in Course.Category.values:
            raise ValidationException(
                f"Invalid category. Must be one of: {', '.join(Course.Category.values)}"
            )
        return list(
            Course.objects.filter(status=Course.Status.ACTIVE, category=category)
            .order_by('title')
        )

    @staticmethod
    def get_course_stats() -> Dict:
        by_status = dict(
            Course.objects.values_list('status').annotate(count=Count('id')).order_by()
        )
        by_category = dict(
            Course.objects.values_list('category').annotate(count=Count('id')).order_by()
        )
        by_level = dict(
            Course.objects.values_list('level').annotate(count=Count('id')).order_by()
        )
        popular = Course.objects.order_by('-current_enrollments', 'title')[:CourseService.POPULAR_LIMIT]

        return {
            'total_courses': sum(by_status.values()),
            'by_status': {s: by_status.get(s, 0) for s in Course.Status.values},
            'by_category': {c: by_category.get(c, 0) for c in Course.Category.values},
            'by_level': {lvl: by_level.get(lvl, 0) for lvl in Course.Level.values},
            'popular_courses': [
                {
                    'id': str(course.id),
                    'title': course.title,
                    'current_enrollments': course.current_enrollments,
                    'max_students': course.max_students,
                    'enrollment_percentage': course.enrollment_percentage,
                }
                for course in popular
            ],
        }
