# services/academy-service/src/apps/core/services/auth_service.py
"""
Authentication Service

Handles:
- Registration with duplicate-email protection
- Credential checks with account lockout
- Bearer token issuance and verification
- Password changes
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import jwt
from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.models import User
from shared.common.exceptions import (
    ConflictException,
    ForbiddenException,
    UnauthorizedException,
    ValidationException,
)

logger = logging.getLogger(__name__)


# ==================== ERRORS ====================

class InvalidCredentialsError(UnauthorizedException):
    default_detail = 'Invalid email or password.'
    default_code = 'invalid_credentials'
    error_code = 'INVALID_CREDENTIALS'


class AccountLockedError(UnauthorizedException):
    default_detail = 'Account is temporarily locked due to too many failed login attempts.'
    default_code = 'account_locked'
    error_code = 'ACCOUNT_LOCKED'

    def __init__(self, locked_until: Optional[datetime] = None):
        super().__init__(extra_data={
            'locked_until': locked_until.isoformat() if locked_until else None
        })
        self.locked_until = locked_until


class TokenInvalidError(UnauthorizedException):
    default_detail = 'Invalid token.'
    default_code = 'token_invalid'
    error_code = 'TOKEN_INVALID'


class TokenExpiredError(UnauthorizedException):
    default_detail = 'Token has expired.'
    default_code = 'token_expired'
    error_code = 'TOKEN_EXPIRED'


class InvalidSessionError(UnauthorizedException):
    default_detail = 'User not found or inactive.'
    default_code = 'invalid_session'
    error_code = 'INVALID_SESSION'


class DuplicateEmailError(ConflictException):
    default_detail = 'User with this email already exists.'
    default_code = 'duplicate_email'
    error_code = 'DUPLICATE_EMAIL'


class UserTypeMismatchError(ValidationException):
    default_detail = 'Invalid user type for this account.'
    default_code = 'user_type_mismatch'
    error_code = 'USER_TYPE_MISMATCH'


# ==================== CONFIGURATION ====================

@dataclass(frozen=True)
class AuthConfig:
    """Settings the auth service needs, resolved once at construction."""

    secret_key: str
    algorithm: str = 'HS256'
    token_lifetime: timedelta = timedelta(days=7)
    max_login_attempts: int = 5
    lockout_duration: timedelta = timedelta(hours=2)
    allow_admin_registration: bool = False

    @classmethod
    def from_settings(cls) -> 'AuthConfig':
        auth_settings = getattr(settings, 'AUTH_SETTINGS', {})
        return cls(
            secret_key=auth_settings.get('SECRET_KEY', settings.SECRET_KEY),
            algorithm=auth_settings.get('ALGORITHM', 'HS256'),
            token_lifetime=auth_settings.get('TOKEN_LIFETIME', timedelta(days=7)),
            max_login_attempts=auth_settings.get('MAX_LOGIN_ATTEMPTS', 5),
            lockout_duration=auth_settings.get('LOCKOUT_DURATION', timedelta(hours=2)),
            allow_admin_registration=auth_settings.get('ALLOW_ADMIN_REGISTRATION', False),
        )


class AuthService:
    """
    Authentication service.

    Lockout state machine: each wrong password increments the user's
    ``login_attempts``; the failure that reaches ``max_login_attempts`` sets
    ``lock_until``. While locked every attempt is refused. A lock that has
    passed is noticed lazily on the next attempt. Any success resets the
    counter and clears the lock.
    """

    def __init__(self, config: Optional[AuthConfig] = None):
        self.config = config or AuthConfig.from_settings()

    # ==================== TOKENS ====================

    def issue_token(self, user_id: Any, issued_at: Optional[datetime] = None) -> str:
        """Sign a bearer token for ``user_id``. Same inputs give the same token."""
        issued_at = issued_at or timezone.now()
        payload = {
            'sub': str(user_id),
            'iat': issued_at,
            'exp': issued_at + self.config.token_lifetime,
        }
        return jwt.encode(payload, self.config.secret_key, algorithm=self.config.algorithm)

    def verify_token(self, token: str) -> Dict:
        """Decode and verify a token, returning its claims."""
        try:
            return jwt.decode(
                token,
                self.config.secret_key,
                algorithms=[self.config.algorithm],
                options={'require': ['exp', 'sub']}
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError()
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid token: {e}")
            raise TokenInvalidError()

    def resolve_user(self, claims: Dict) -> User:
        """Load the active user a verified token refers to."""
        try:
            user = User.objects.get(pk=claims.get('sub'))
        except (User.DoesNotExist, ValueError, TypeError, DjangoValidationError):
            raise InvalidSessionError()

        if not user.is_active:
            raise InvalidSessionError()

        return user

    def authenticate_token(self, token: str) -> User:
        return self.resolve_user(self.verify_token(token))

    def refresh_token(self, user: User) -> str:
        token = self.issue_token(user.id)
        logger.info(f"Token refreshed: {user.email}")
        return token

    # ==================== REGISTRATION ====================

    @transaction.atomic
    def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: str = '',
        user_type: str = User.UserType.STUDENT,
        **extra_fields
    ) -> Dict:
        """
        Register a new account and sign it in.

        Returns:
            Dict with ``user`` and ``token``

        Raises:
            DuplicateEmailError: If the email is already registered
            ForbiddenException: If admin self-registration is disabled
        """
        email = email.strip().lower()

        if user_type == User.UserType.ADMIN and not self.config.allow_admin_registration:
            raise ForbiddenException('Administrator accounts cannot be self-registered.')

        if User.objects.filter(email__iexact=email).exists():
            raise DuplicateEmailError()

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    email=email,
                    password=password,
                    first_name=first_name,
                    last_name=last_name,
                    phone=phone,
                    user_type=user_type,
                    **extra_fields
                )
        except IntegrityError:
            # Lost a race with a concurrent registration
            raise DuplicateEmailError()

        logger.info(f"User registered: {user.email} ({user.user_type})")

        return {'user': user, 'token': self.issue_token(user.id)}

    # ==================== LOGIN ====================

    def authenticate(self, email: str, password: str) -> User:
        """
        Check credentials against an active account.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
            AccountLockedError: Account is inside its lockout window
        """
        user = User.objects.filter(email__iexact=email.strip(), is_active=True).first()
        if user is None:
            logger.warning(f"Login attempt for unknown or inactive email: {email}")
            raise InvalidCredentialsError()

        if user.is_locked:
            logger.warning(f"Login attempt on locked account: {user.email}")
            raise AccountLockedError(user.lock_until)

        if not user.check_password(password):
            # Persist the failure before raising so it is not rolled back
            user = self._record_login_failure(user)
            if user.is_locked:
                logger.warning(
                    f"Account locked: {user.email} until {user.lock_until.isoformat()}"
                )
            raise InvalidCredentialsError()

        self._record_login_success(user)
        return user

    def login(self, email: str, password: str, user_type: Optional[str] = None) -> Dict:
        """
        Authenticate and issue a token.

        ``user_type``, when given, must match the account's role.
        """
        user = self.authenticate(email, password)

        if user_type and user.user_type != user_type:
            raise UserTypeMismatchError()

        logger.info(f"User logged in: {user.email}")

        return {'user': user, 'token': self.issue_token(user.id)}

    def logout(self, user: User) -> None:
        # Tokens are stateless; the client discards its copy
        logger.info(f"User logged out: {user.email}")

    @transaction.atomic
    def _record_login_failure(self, user: User) -> User:
        user = User.objects.select_for_update().get(pk=user.pk)
        now = timezone.now()

        if user.lock_until and user.lock_until <= now:
            # Previous lock expired, start counting again
            user.login_attempts = 1
            user.lock_until = None
        else:
            user.login_attempts += 1

        if user.login_attempts >= self.config.max_login_attempts and not user.is_locked:
            user.lock_until = now + self.config.lockout_duration

        user.save(update_fields=['login_attempts', 'lock_until', 'updated_at'])
        return user

    def _record_login_success(self, user: User) -> None:
        user.login_attempts = 0
        user.lock_until = None
        user.last_login = timezone.now()
        user.save(update_fields=['login_attempts', 'lock_until', 'last_login', 'updated_at'])

    # ==================== PASSWORD ====================

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not user.check_password(current_password):
            raise ValidationException('Current password is incorrect.', error_code='INVALID_PASSWORD')

        user.set_password(new_password)
        user.save(update_fields=['password', 'updated_at'])

        logger.info(f"Password changed: {user.email}")
