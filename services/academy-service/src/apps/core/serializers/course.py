# services/academy-service/src/apps/core/serializers/course.py
"""
Course Serializers
"""

from rest_framework import serializers

from apps.core.models import Course
from shared.common.validators import validate_string_list


class CourseListSerializer(serializers.ModelSerializer):
    """Catalog card representation."""

    is_available = serializers.ReadOnlyField()
    enrollment_percentage = serializers.ReadOnlyField()

    class Meta:
        model = Course
        fields = [
            'id', 'title', 'description', 'duration', 'price', 'price_numeric',
            'status', 'category', 'level', 'featured', 'tags', 'image',
            'max_students', 'current_enrollments', 'is_available', 'enrollment_percentage',
            'created_at',
        ]
        read_only_fields = fields


class CourseDetailSerializer(serializers.ModelSerializer):
    """Full course representation."""

    is_available = serializers.ReadOnlyField()
    enrollment_percentage = serializers.ReadOnlyField()
    active_enrollments = serializers.SerializerMethodField()
    created_by = serializers.UUIDField(source='created_by_id', read_only=True)
    last_modified_by = serializers.UUIDField(source='last_modified_by_id', read_only=True)

    class Meta:
        model = Course
        fields = [
            'id', 'title', 'description', 'duration', 'price', 'price_numeric',
            'status', 'category', 'level', 'featured', 'tags', 'image',
            'prerequisites', 'curriculum', 'instructor_requirements', 'aircraft_requirements',
            'materials', 'exam_requirements', 'certification_details', 'estimated_completion_time',
            'max_students', 'current_enrollments', 'is_available', 'enrollment_percentage',
            'active_enrollments', 'created_by', 'last_modified_by', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_active_enrollments(self, obj):
        if hasattr(obj, 'active_enrollments'):
            return obj.active_enrollments
        return self.context.get('active_enrollments')


class CurriculumModuleSerializer(serializers.Serializer):
    module = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    estimated_hours = serializers.FloatField(min_value=0, required=False)
    topics = serializers.ListField(child=serializers.CharField(), required=False)


class CourseWriteSerializer(serializers.ModelSerializer):
    """
    Create/update payload. ``price_numeric`` is derived from ``price`` by
    the service and cannot be written directly.
    """

    title = serializers.CharField(min_length=5, max_length=100)
    description = serializers.CharField(min_length=10, max_length=1000)
    price = serializers.CharField(max_length=50)
    max_students = serializers.IntegerField(min_value=1, required=False)
    curriculum = CurriculumModuleSerializer(many=True, required=False)

    class Meta:
        model = Course
        fields = [
            'title', 'description', 'duration', 'price',
            'status', 'category', 'level', 'featured', 'tags', 'image',
            'prerequisites', 'curriculum', 'instructor_requirements', 'aircraft_requirements',
            'materials', 'exam_requirements', 'certification_details', 'estimated_completion_time',
            'max_students',
        ]

    def validate_tags(self, value):
        return validate_string_list(value, 'tags')

    def validate_prerequisites(self, value):
        return validate_string_list(value, 'prerequisites')

    def validate_aircraft_requirements(self, value):
        return validate_string_list(value, 'aircraft_requirements')

    def validate_instructor_requirements(self, value):
        return validate_string_list(value, 'instructor_requirements')

    def validate_certification_details(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('certification_details must be an object')
        return value
