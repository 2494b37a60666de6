# services/academy-service/src/apps/core/serializers/auth.py
"""
Authentication Serializers

Includes:
- Registration and login requests
- Password change request
"""

from rest_framework import serializers

from apps.core.models import User
from shared.common.validators import validate_name, validate_password_strength, validate_phone_number


class RegisterSerializer(serializers.Serializer):
    """
    Serializer for account registration.
    """

    first_name = serializers.CharField(max_length=50)
    last_name = serializers.CharField(max_length=50)
    email = serializers.EmailField(max_length=255)
    password = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )
    phone = serializers.CharField(max_length=30)
    user_type = serializers.ChoiceField(
        choices=User.UserType.choices,
        default=User.UserType.STUDENT
    )
    gender = serializers.ChoiceField(
        choices=User.Gender.choices,
        required=False,
        allow_null=True
    )

    def validate_first_name(self, value):
        return validate_name(value, 'First name')

    def validate_last_name(self, value):
        return validate_name(value, 'Last name')

    def validate_email(self, value):
        """Normalize email to lowercase."""
        return value.lower().strip()

    def validate_password(self, value):
        return validate_password_strength(value)

    def validate_phone(self, value):
        return validate_phone_number(value)


class LoginSerializer(serializers.Serializer):
    """
    Serializer for user login request.
    """

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )
    user_type = serializers.ChoiceField(
        choices=User.UserType.choices,
        required=True
    )

    def validate_email(self, value):
        """Normalize email to lowercase."""
        return value.lower().strip()


class PasswordChangeSerializer(serializers.Serializer):
    """
    Serializer for password change (authenticated user).
    """

    current_password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )
    new_password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )
    confirm_password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )

    def validate_new_password(self, value):
        return validate_password_strength(value)

    def validate(self, attrs):
        if attrs['new_password'] != attrs['confirm_password']:
            raise serializers.ValidationError({
                'confirm_password': 'New passwords do not match.'
            })
        return attrs
