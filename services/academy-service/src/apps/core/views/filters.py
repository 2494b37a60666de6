# services/academy-service/src/apps/core/views/filters.py
"""
API Filters

Django Filter classes for academy listings.
"""

import django_filters

from apps.core.models import Course, Enrollment, User
from apps.core.services import CourseService, EnrollmentService, UserService
from shared.common.permissions import Roles, has_role


class UserFilter(django_filters.FilterSet):
    """Filter for the admin user listing."""

    user_type = django_filters.ChoiceFilter(choices=User.UserType.choices)
    is_active = django_filters.BooleanFilter()
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = User
        fields = ['user_type', 'is_active']

    def filter_search(self, queryset, name, value):
        return UserService.search(queryset, value.strip()) if value.strip() else queryset


class StudentFilter(django_filters.FilterSet):
    """Filter for the admin student table."""

    is_active = django_filters.BooleanFilter()
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = User
        fields = ['is_active']

    def filter_search(self, queryset, name, value):
        return UserService.search(queryset, value.strip()) if value.strip() else queryset


class CourseFilter(django_filters.FilterSet):
    """
    Filter for the course catalog.

    Listings default to active courses. Administrators may ask for another
    status, or ``all``; the parameter is ignored for everyone else.
    """

    ALL = 'all'

    status = django_filters.CharFilter(method='filter_status')
    category = django_filters.ChoiceFilter(choices=Course.Category.choices)
    level = django_filters.ChoiceFilter(choices=Course.Level.choices)
    featured = django_filters.BooleanFilter()
    search = django_filters.CharFilter(method='filter_search')

    ordering = django_filters.OrderingFilter(
        fields=(
            ('created_at', 'created_at'),
            ('title', 'title'),
            ('price_numeric', 'price'),
            ('featured', 'featured'),
        )
    )

    class Meta:
        model = Course
        fields = ['category', 'level', 'featured']

    def filter_queryset(self, queryset):
        queryset = super().filter_queryset(queryset)
        # Default when no status was requested
        if not self.form.cleaned_data.get('status'):
            queryset = queryset.filter(status=Course.Status.ACTIVE)
        return queryset

    def filter_status(self, queryset, name, value):
        if not has_role(getattr(self.request, 'user', None), Roles.ADMIN):
            return queryset.filter(status=Course.Status.ACTIVE)
        if value == self.ALL:
            return queryset
        return queryset.filter(status=value)

    def filter_search(self, queryset, name, value):
        return CourseService.search(queryset, value.strip()) if value.strip() else queryset


class EnrollmentFilter(django_filters.FilterSet):
    """Filter for the admin enrollment listing."""

    status = django_filters.ChoiceFilter(choices=Enrollment.Status.choices)
    payment_status = django_filters.ChoiceFilter(choices=Enrollment.PaymentStatus.choices)
    course = django_filters.UUIDFilter(field_name='course_id')
    student = django_filters.UUIDFilter(field_name='student_id')
    search = django_filters.CharFilter(method='filter_search')

    enrolled_after = django_filters.DateFilter(field_name='enrollment_date', lookup_expr='date__gte')
    enrolled_before = django_filters.DateFilter(field_name='enrollment_date', lookup_expr='date__lte')

    class Meta:
        model = Enrollment
        fields = ['status', 'payment_status']

    def filter_search(self, queryset, name, value):
        return EnrollmentService.search(queryset, value.strip()) if value.strip() else queryset
