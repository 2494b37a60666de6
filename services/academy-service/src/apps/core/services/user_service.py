# services/academy-service/src/apps/core/services/user_service.py
"""
User Service - profile management and account administration.
"""

import logging
from datetime import timedelta
from typing import Any, Dict

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Count, Q
from django.utils import timezone

from apps.core.models import User
from shared.common.exceptions import NotFoundException, ValidationException
from shared.common.permissions import Roles, has_role, require_owner_or_admin

logger = logging.getLogger(__name__)


class UserNotFoundError(NotFoundException):
    default_detail = 'User not found.'
    error_code = 'USER_NOT_FOUND'


class UserService:
    """Service for user profile operations"""

    PROFILE_FIELDS = (
        'first_name', 'last_name', 'phone', 'gender', 'date_of_birth',
        'address_street', 'address_city', 'address_state', 'address_zip_code', 'address_country',
        'emergency_contact_name', 'emergency_contact_relationship', 'emergency_contact_phone',
        'medical_certificate_number', 'medical_certificate_expiry', 'medical_certificate_class',
        'profile_image',
    )
    ADMIN_FIELDS = ('is_active', 'flight_hours', 'certificates')

    @staticmethod
    def get_user(user_id: Any) -> User:
        try:
            return User.objects.get(pk=user_id)
        except (User.DoesNotExist, ValueError, DjangoValidationError):
            raise UserNotFoundError()

    @staticmethod
    def get_user_for(actor: User, user_id: Any) -> User:
        """Fetch a profile the actor may read (own profile or any as admin)"""
        require_owner_or_admin(actor, user_id)
        return UserService.get_user(user_id)

    @staticmethod
    def update_profile(actor: User, user_id: Any, data: Dict) -> User:
        """
        Update profile fields. Fields outside the allowed set are ignored;
        administrators may also change activation and aviation counters.
        """
        user = UserService.get_user_for(actor, user_id)

        allowed = list(UserService.PROFILE_FIELDS)
        if has_role(actor, Roles.ADMIN):
            allowed.extend(UserService.ADMIN_FIELDS)

        updated = []
        for field in allowed:
            if field in data:
                setattr(user, field, data[field])
                updated.append(field)

        if updated:
            user.save(update_fields=updated + ['updated_at'])
            logger.info(f"Profile updated: {user.email} fields={updated} by {actor.email}")

        return user

    @staticmethod
    def deactivate_user(actor: User, user_id: Any) -> User:
        """Soft delete: accounts are never removed"""
        user = UserService.get_user(user_id)
        return UserService.set_active(actor, user, False)

    @staticmethod
    def set_active(actor: User, user: User, is_active: bool) -> User:
        if not is_active and str(user.pk) == str(actor.pk):
            raise ValidationException('You cannot deactivate your own account.')

        user.is_active = is_active
        user.save(update_fields=['is_active', 'updated_at'])

        state = 'activated' if is_active else 'deactivated'
        logger.info(f"User {state}: {user.email} by {actor.email}")
        return user

    @staticmethod
    def search(queryset, term: str):
        return queryset.filter(
            Q(first_name__icontains=term) |
            Q(last_name__icontains=term) |
            Q(email__icontains=term)
        )

    @staticmethod
    def get_user_stats() -> Dict:
        since = timezone.now() - timedelta(days=30)
        stats = User.objects.aggregate(
            total=Count('id'),
            students=Count('id', filter=Q(user_type=User.UserType.STUDENT)),
            admins=Count('id', filter=Q(user_type=User.UserType.ADMIN)),
            active=Count('id', filter=Q(is_active=True)),
            inactive=Count('id', filter=Q(is_active=False)),
            recent_registrations=Count('id', filter=Q(created_at__gte=since)),
        )
        return stats
