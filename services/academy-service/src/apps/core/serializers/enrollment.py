# services/academy-service/src/apps/core/serializers/enrollment.py
"""
Enrollment Serializers
"""

from rest_framework import serializers

from apps.core.models import Enrollment, EnrollmentNote, PaymentInstallment, User
from apps.core.models.enrollment import default_flight_hours
from shared.common.permissions import Roles, has_role


# ==================== NESTED ====================

class PaymentInstallmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentInstallment
        fields = ['sequence', 'due_date', 'amount', 'status', 'paid_date', 'transaction_id']
        read_only_fields = fields


class EnrollmentNoteSerializer(serializers.ModelSerializer):
    author_id = serializers.UUIDField(read_only=True)
    author_name = serializers.SerializerMethodField()

    class Meta:
        model = EnrollmentNote
        fields = ['id', 'author_id', 'author_name', 'note_type', 'content', 'is_private', 'created_at']
        read_only_fields = fields

    def get_author_name(self, obj):
        return obj.author.full_name if obj.author else None


class StudentSummarySerializer(serializers.ModelSerializer):
    full_name = serializers.ReadOnlyField()

    class Meta:
        model = User
        fields = ['id', 'first_name', 'last_name', 'full_name', 'email', 'phone']
        read_only_fields = fields


class CourseSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    title = serializers.CharField()
    category = serializers.CharField()
    level = serializers.CharField()
    duration = serializers.CharField()
    price = serializers.CharField()


# ==================== READ ====================

class EnrollmentListSerializer(serializers.ModelSerializer):
    """Compact representation for listings."""

    student = StudentSummarySerializer(read_only=True)
    course = CourseSummarySerializer(read_only=True)
    payment_progress = serializers.ReadOnlyField()

    class Meta:
        model = Enrollment
        fields = [
            'id', 'student', 'course', 'enrollment_date', 'status',
            'payment_mode', 'installments', 'total_amount', 'amount_paid',
            'payment_status', 'payment_progress', 'overall_progress', 'is_completed',
        ]
        read_only_fields = fields


class EnrollmentDetailSerializer(serializers.ModelSerializer):
    """
    Full enrollment. Private notes are only included for administrators.
    """

    student = StudentSummarySerializer(read_only=True)
    course = CourseSummarySerializer(read_only=True)
    instructor_id = serializers.UUIDField(read_only=True)
    payment_schedule = PaymentInstallmentSerializer(many=True, read_only=True)
    notes = serializers.SerializerMethodField()
    payment_progress = serializers.ReadOnlyField()
    pending_amount = serializers.ReadOnlyField()
    days_since_enrollment = serializers.ReadOnlyField()

    class Meta:
        model = Enrollment
        fields = [
            'id', 'student', 'course', 'enrollment_date', 'status',
            # Payment
            'payment_mode', 'installments', 'total_amount', 'amount_paid', 'pending_amount',
            'payment_status', 'payment_progress', 'payment_schedule',
            # Academic
            'start_date', 'expected_completion_date', 'actual_completion_date',
            'instructor_id', 'aircraft_log',
            # Progress
            'overall_progress', 'modules_completed', 'flight_hours', 'exam_results',
            'sessions', 'documents',
            # Completion
            'is_completed', 'completion_date', 'final_grade',
            'certificate_issued', 'certificate_number', 'certificate_issue_date',
            'notes', 'days_since_enrollment', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_notes(self, obj):
        notes = obj.notes.select_related('author').all()
        request = self.context.get('request')
        if not (request and has_role(request.user, Roles.ADMIN)):
            notes = [note for note in notes if not note.is_private]
        return EnrollmentNoteSerializer(notes, many=True).data


# ==================== WRITE ====================

class EnrollmentCreateSerializer(serializers.Serializer):
    course_id = serializers.UUIDField()
    payment_mode = serializers.ChoiceField(choices=Enrollment.PaymentMode.choices)
    installments = serializers.ChoiceField(choices=Enrollment.InstallmentPlan.choices)
    gender = serializers.ChoiceField(choices=User.Gender.choices, required=False, allow_null=True)


class ExamResultSerializer(serializers.Serializer):
    EXAM_TYPES = ('written', 'oral', 'practical', 'checkride')

    exam_type = serializers.ChoiceField(choices=EXAM_TYPES)
    date = serializers.DateField(required=False)
    score = serializers.FloatField(min_value=0, max_value=100, required=False)
    passed = serializers.BooleanField(required=False)
    attempts = serializers.IntegerField(min_value=1, required=False, default=1)
    examiner = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        # Stored as JSON
        if attrs.get('date'):
            attrs['date'] = attrs['date'].isoformat()
        return dict(attrs)


class ProgressUpdateSerializer(serializers.Serializer):
    overall_progress = serializers.IntegerField(min_value=0, max_value=100, required=False)
    modules_completed = serializers.ListField(child=serializers.JSONField(), required=False)
    flight_hours = serializers.DictField(child=serializers.FloatField(min_value=0), required=False)
    exam_results = ExamResultSerializer(many=True, required=False)

    def validate_flight_hours(self, value):
        unknown = set(value) - set(default_flight_hours())
        if unknown:
            raise serializers.ValidationError(
                f"Unknown flight hour categories: {', '.join(sorted(unknown))}"
            )
        return value

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('No progress fields provided.')
        return attrs


class PaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    transaction_id = serializers.CharField(max_length=100, required=False, allow_blank=True)


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Enrollment.Status.choices)


class NoteCreateSerializer(serializers.Serializer):
    content = serializers.CharField(max_length=5000)
    note_type = serializers.ChoiceField(
        choices=EnrollmentNote.NoteType.choices,
        default=EnrollmentNote.NoteType.ACADEMIC
    )
    is_private = serializers.BooleanField(default=False)
