# services/academy-service/src/apps/core/admin.py
"""
Django Admin configuration for Academy Service
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from apps.core.models import User, Course, Enrollment, PaymentInstallment, EnrollmentNote


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['email', 'full_name', 'user_type', 'is_active', 'login_attempts', 'lock_until', 'created_at']
    list_filter = ['user_type', 'is_active', 'gender', 'created_at']
    search_fields = ['email', 'first_name', 'last_name']
    ordering = ['-created_at']

    fieldsets = (
        (None, {'fields': ('email', 'password', 'user_type')}),
        ('Personal info', {'fields': ('first_name', 'last_name', 'phone', 'gender', 'date_of_birth')}),
        ('Address', {'fields': ('address_street', 'address_city', 'address_state', 'address_zip_code', 'address_country')}),
        ('Aviation', {'fields': ('flight_hours', 'certificates', 'medical_certificate_number',
                                 'medical_certificate_expiry', 'medical_certificate_class')}),
        ('Status', {'fields': ('is_active', 'is_superuser')}),
        ('Security', {'fields': ('login_attempts', 'lock_until')}),
        ('Dates', {'fields': ('last_login', 'created_at', 'updated_at')}),
    )

    readonly_fields = ['created_at', 'updated_at', 'last_login']

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'password1', 'password2', 'first_name', 'last_name', 'user_type'),
        }),
    )

    filter_horizontal = []


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['title', 'category', 'level', 'status', 'price', 'current_enrollments', 'max_students', 'featured']
    list_filter = ['status', 'category', 'level', 'featured']
    search_fields = ['title', 'description']
    readonly_fields = ['price_numeric', 'current_enrollments', 'created_at', 'updated_at']


class PaymentInstallmentInline(admin.TabularInline):
    model = PaymentInstallment
    extra = 0
    readonly_fields = ['sequence', 'due_date', 'amount', 'status', 'paid_date', 'transaction_id']


class EnrollmentNoteInline(admin.TabularInline):
    model = EnrollmentNote
    extra = 0
    raw_id_fields = ['author']


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ['student', 'course', 'status', 'payment_status', 'overall_progress', 'enrollment_date']
    list_filter = ['status', 'payment_status', 'payment_mode', 'installments']
    search_fields = ['student__email', 'student__first_name', 'student__last_name', 'course__title']
    raw_id_fields = ['student', 'course', 'instructor']
    inlines = [PaymentInstallmentInline, EnrollmentNoteInline]
