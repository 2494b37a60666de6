# services/academy-service/src/apps/core/models/user.py
"""
User model for the flight academy.
Students and administrators share one account table; the lock state lives
on the row so lockout survives restarts.
"""

import uuid
from django.db import models
from django.db.models.functions import Lower
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.validators import MinValueValidator
from django.utils import timezone


class UserManager(BaseUserManager):
    """Custom user manager keyed on case-insensitive email"""

    def create_user(self, email, password=None, **extra_fields):
        """Create and return a regular user"""
        if not email:
            raise ValueError('Email is required')

        email = self.normalize_email(email).lower()
        extra_fields.setdefault('user_type', User.UserType.STUDENT)

        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """Create and return an administrator with Django admin access"""
        extra_fields.setdefault('user_type', User.UserType.ADMIN)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('first_name', 'Admin')
        extra_fields.setdefault('last_name', 'User')
        extra_fields.setdefault('phone', '')
        return self.create_user(email, password, **extra_fields)

    def get_by_natural_key(self, username):
        return self.get(email__iexact=username)

    def students(self):
        return self.filter(user_type=User.UserType.STUDENT)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Academy account.

    ``login_attempts`` counts consecutive failures; ``lock_until`` in the
    future blocks authentication regardless of the password supplied.
    """

    class UserType(models.TextChoices):
        STUDENT = 'student', 'Student'
        ADMIN = 'admin', 'Admin'

    class Gender(models.TextChoices):
        MALE = 'male', 'Male'
        FEMALE = 'female', 'Female'
        OTHER = 'other', 'Other'
        PREFER_NOT_TO_SAY = 'prefer-not-to-say', 'Prefer not to say'

    class MedicalClass(models.TextChoices):
        FIRST = 'first', 'First Class'
        SECOND = 'second', 'Second Class'
        THIRD = 'third', 'Third Class'

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    # Identity
    email = models.EmailField(max_length=255, unique=True)
    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)
    phone = models.CharField(max_length=30, blank=True, default='')
    user_type = models.CharField(
        max_length=20,
        choices=UserType.choices,
        default=UserType.STUDENT,
        db_index=True
    )
    # Password hash is inherited from AbstractBaseUser

    # Demographics
    date_of_birth = models.DateField(blank=True, null=True)
    gender = models.CharField(
        max_length=20,
        choices=Gender.choices,
        blank=True,
        null=True
    )

    # Address
    address_street = models.CharField(max_length=255, blank=True, default='')
    address_city = models.CharField(max_length=100, blank=True, default='')
    address_state = models.CharField(max_length=100, blank=True, default='', db_index=True)
    address_zip_code = models.CharField(max_length=20, blank=True, default='')
    address_country = models.CharField(max_length=100, blank=True, default='USA')

    # Emergency contact
    emergency_contact_name = models.CharField(max_length=100, blank=True, default='')
    emergency_contact_relationship = models.CharField(max_length=50, blank=True, default='')
    emergency_contact_phone = models.CharField(max_length=30, blank=True, default='')

    # Medical certificate
    medical_certificate_number = models.CharField(max_length=50, blank=True, default='')
    medical_certificate_expiry = models.DateField(blank=True, null=True)
    medical_certificate_class = models.CharField(
        max_length=10,
        choices=MedicalClass.choices,
        blank=True,
        default=''
    )

    # Aviation record
    flight_hours = models.DecimalField(
        max_digits=8,
        decimal_places=1,
        default=0,
        validators=[MinValueValidator(0)]
    )
    certificates = models.PositiveIntegerField(default=0)
    profile_image = models.URLField(max_length=500, blank=True, default='')

    # Account state
    is_active = models.BooleanField(default=True, db_index=True)
    login_attempts = models.PositiveIntegerField(default=0)
    lock_until = models.DateTimeField(blank=True, null=True)
    # last_login is inherited from AbstractBaseUser

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'users'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user_type', 'is_active']),
            models.Index(fields=['created_at']),
        ]
        constraints = [
            models.UniqueConstraint(Lower('email'), name='users_email_ci_unique'),
        ]

    def __str__(self):
        return f"{self.full_name} <{self.email}>"

    # ==================== PROPERTIES ====================

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def role(self):
        return self.user_type

    @property
    def is_admin(self):
        return self.user_type == self.UserType.ADMIN

    @property
    def is_staff(self):
        """Django admin access follows the academy admin role"""
        return self.is_admin

    @property
    def is_locked(self):
        return bool(self.lock_until and self.lock_until > timezone.now())
