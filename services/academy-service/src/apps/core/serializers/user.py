# services/academy-service/src/apps/core/serializers/user.py
"""
User Serializers

Passwords and lockout counters are never serialized.
"""

from rest_framework import serializers

from apps.core.models import User, Enrollment
from shared.common.validators import validate_name, validate_phone_number


class AddressSerializer(serializers.Serializer):
    street = serializers.CharField(source='address_street', allow_blank=True)
    city = serializers.CharField(source='address_city', allow_blank=True)
    state = serializers.CharField(source='address_state', allow_blank=True)
    zip_code = serializers.CharField(source='address_zip_code', allow_blank=True)
    country = serializers.CharField(source='address_country', allow_blank=True)


class EmergencyContactSerializer(serializers.Serializer):
    name = serializers.CharField(source='emergency_contact_name', allow_blank=True)
    relationship = serializers.CharField(source='emergency_contact_relationship', allow_blank=True)
    phone = serializers.CharField(source='emergency_contact_phone', allow_blank=True)


class MedicalCertificateSerializer(serializers.Serializer):
    number = serializers.CharField(source='medical_certificate_number', allow_blank=True)
    expiry_date = serializers.DateField(source='medical_certificate_expiry', allow_null=True)
    medical_class = serializers.CharField(source='medical_certificate_class', allow_blank=True)


class UserSerializer(serializers.ModelSerializer):
    """Full user representation."""

    full_name = serializers.ReadOnlyField()
    address = AddressSerializer(source='*', read_only=True)
    emergency_contact = EmergencyContactSerializer(source='*', read_only=True)
    medical_certificate = MedicalCertificateSerializer(source='*', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'first_name', 'last_name', 'full_name', 'phone',
            'user_type', 'gender', 'date_of_birth',
            'address', 'emergency_contact', 'medical_certificate',
            'flight_hours', 'certificates', 'profile_image',
            'is_active', 'last_login', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class UserListSerializer(serializers.ModelSerializer):
    """Compact user representation for listings."""

    full_name = serializers.ReadOnlyField()

    class Meta:
        model = User
        fields = [
            'id', 'email', 'first_name', 'last_name', 'full_name', 'phone',
            'user_type', 'is_active', 'last_login', 'created_at',
        ]
        read_only_fields = fields


class UserUpdateSerializer(serializers.Serializer):
    """
    Profile update payload.

    ``is_active``, ``flight_hours`` and ``certificates`` are only applied
    when an administrator sends them.
    """

    first_name = serializers.CharField(max_length=50, required=False)
    last_name = serializers.CharField(max_length=50, required=False)
    phone = serializers.CharField(max_length=30, required=False)
    gender = serializers.ChoiceField(choices=User.Gender.choices, required=False, allow_null=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    address = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False)
    emergency_contact = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False)
    medical_certificate = serializers.DictField(required=False)
    profile_image = serializers.URLField(required=False, allow_blank=True)

    is_active = serializers.BooleanField(required=False)
    flight_hours = serializers.DecimalField(max_digits=8, decimal_places=1, min_value=0, required=False)
    certificates = serializers.IntegerField(min_value=0, required=False)

    NESTED = {
        'address': {
            'street': 'address_street',
            'city': 'address_city',
            'state': 'address_state',
            'zip_code': 'address_zip_code',
            'country': 'address_country',
        },
        'emergency_contact': {
            'name': 'emergency_contact_name',
            'relationship': 'emergency_contact_relationship',
            'phone': 'emergency_contact_phone',
        },
        'medical_certificate': {
            'number': 'medical_certificate_number',
            'expiry_date': 'medical_certificate_expiry',
            'medical_class': 'medical_certificate_class',
        },
    }

    def validate_first_name(self, value):
        return validate_name(value, 'First name')

    def validate_last_name(self, value):
        return validate_name(value, 'Last name')

    def validate_phone(self, value):
        return validate_phone_number(value)

    def validate_medical_certificate(self, value):
        medical_class = value.get('medical_class')
        if medical_class and medical_class not in User.MedicalClass.values:
            raise serializers.ValidationError(
                f"medical_class must be one of: {', '.join(User.MedicalClass.values)}"
            )
        expiry = value.get('expiry_date')
        if expiry:
            value['expiry_date'] = serializers.DateField().to_internal_value(expiry)
        return value

    def to_model_fields(self):
        """Flatten validated nested groups into model field names."""
        data = dict(self.validated_data)
        for group, mapping in self.NESTED.items():
            values = data.pop(group, None) or {}
            for key, field in mapping.items():
                if key in values:
                    data[field] = values[key] if values[key] is not None else ''
        if data.get('medical_certificate_expiry') == '':
            data['medical_certificate_expiry'] = None
        return data


class EnrolledCourseSerializer(serializers.ModelSerializer):
    """Course summary shown on the current user's profile."""

    course_id = serializers.UUIDField(source='course.id', read_only=True)
    course_name = serializers.CharField(source='course.title', read_only=True)
    description = serializers.CharField(source='course.description', read_only=True)
    duration = serializers.CharField(source='course.duration', read_only=True)
    price = serializers.CharField(source='course.price', read_only=True)
    progress = serializers.IntegerField(source='overall_progress', read_only=True)

    class Meta:
        model = Enrollment
        fields = [
            'id', 'course_id', 'course_name', 'description', 'duration', 'price',
            'status', 'enrollment_date', 'progress', 'payment_status',
        ]
        read_only_fields = fields


class StudentAdminSerializer(UserListSerializer):
    """Student row for the admin student table."""

    total_courses = serializers.IntegerField(read_only=True)
    active_courses = serializers.IntegerField(read_only=True)
    enrollments = EnrolledCourseSerializer(many=True, read_only=True)

    class Meta(UserListSerializer.Meta):
        fields = UserListSerializer.Meta.fields + ['total_courses', 'active_courses', 'enrollments']
        read_only_fields = fields


class StudentStatusSerializer(serializers.Serializer):
    is_active = serializers.BooleanField(required=True)
