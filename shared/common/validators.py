"""
Shared Validators Module.

Common validation utilities used by serializers and services.
"""
import re
from typing import List

from django.core.exceptions import ValidationError


# =============================================================================
# STRING VALIDATORS
# =============================================================================

PHONE_PATTERN = re.compile(r'^\+?[\d\s\-\(\)]+$')


def validate_phone_number(value: str, field_name: str = "phone") -> str:
    """Validate phone number format (digits, spaces, dashes, parentheses, optional +)."""
    value = (value or '').strip()

    if not value:
        raise ValidationError(f"{field_name} is required")

    if not PHONE_PATTERN.match(value):
        raise ValidationError(f"Please enter a valid {field_name} number")

    return value


def validate_name(value: str, field_name: str = "name", min_length: int = 2, max_length: int = 50) -> str:
    value = (value or '').strip()
    if len(value) < min_length or len(value) > max_length:
        raise ValidationError(
            f"{field_name} must be between {min_length} and {max_length} characters"
        )
    return value


def validate_password_strength(value: str, min_length: int = 6) -> str:
    """
    Password policy: minimum length plus at least one lowercase letter,
    one uppercase letter and one digit.
    """
    errors = []
    if len(value) < min_length:
        errors.append(f"Password must be at least {min_length} characters")
    if not re.search(r'[a-z]', value):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r'[A-Z]', value):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r'\d', value):
        errors.append("Password must contain at least one number")

    if errors:
        raise ValidationError(errors)
    return value


# =============================================================================
# LIST VALIDATORS
# =============================================================================

def validate_string_list(value: List, field_name: str = "list") -> List[str]:
    """Validate a list of non-empty strings, stripping whitespace."""
    if not isinstance(value, list):
        raise ValidationError(f"{field_name} must be a list")
    cleaned = []
    for item in value:
        if not isinstance(item, str):
            raise ValidationError(f"{field_name} must only contain strings")
        item = item.strip()
        if item:
            cleaned.append(item)
    return cleaned
