# services/academy-service/src/apps/core/models/course.py
"""
Course catalog model.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


def default_aircraft_requirements():
    return ['Single Engine']


def default_certification_details():
    return {'issuing_authority': 'FAA'}


class Course(models.Model):
    """
    A course offering in the academy catalog.

    ``price`` is the display string shown to students; ``price_numeric`` is
    derived from it and is what enrollments are charged.
    """

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        INACTIVE = 'inactive', 'Inactive'
        DRAFT = 'draft', 'Draft'

    class Category(models.TextChoices):
        LICENSE = 'license', 'License'
        RATING = 'rating', 'Rating'
        CERTIFICATION = 'certification', 'Certification'
        ADVANCED = 'advanced', 'Advanced'

    class Level(models.TextChoices):
        BEGINNER = 'beginner', 'Beginner'
        INTERMEDIATE = 'intermediate', 'Intermediate'
        ADVANCED = 'advanced', 'Advanced'

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    # Basic Information
    title = models.CharField(max_length=100)
    description = models.TextField(max_length=1000)
    duration = models.CharField(max_length=100)
    price = models.CharField(max_length=50)
    price_numeric = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))]
    )

    # Classification
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True
    )
    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        db_index=True
    )
    level = models.CharField(
        max_length=20,
        choices=Level.choices,
        default=Level.BEGINNER
    )
    featured = models.BooleanField(default=False, db_index=True)
    tags = models.JSONField(default=list, blank=True)
    image = models.URLField(max_length=500, blank=True, default='')

    # Requirements and content
    prerequisites = models.JSONField(default=list, blank=True)
    curriculum = models.JSONField(default=list, blank=True)
    instructor_requirements = models.JSONField(default=list, blank=True)
    aircraft_requirements = models.JSONField(default=default_aircraft_requirements, blank=True)
    materials = models.JSONField(default=list, blank=True)
    exam_requirements = models.JSONField(default=list, blank=True)
    certification_details = models.JSONField(default=default_certification_details, blank=True)
    estimated_completion_time = models.CharField(max_length=100, blank=True, default='')

    # Capacity
    max_students = models.PositiveIntegerField(
        default=20,
        validators=[MinValueValidator(1)]
    )
    current_enrollments = models.PositiveIntegerField(default=0)

    # Audit
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='courses_created'
    )
    last_modified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='courses_modified'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'courses'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'category']),
            models.Index(fields=['status', 'featured']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(current_enrollments__lte=models.F('max_students')),
                name='course_enrollments_within_capacity'
            ),
        ]

    def __str__(self):
        return self.title

    @property
    def is_full(self) -> bool:
        return self.current_enrollments >= self.max_students

    @property
    def is_available(self) -> bool:
        return self.status == self.Status.ACTIVE and not self.is_full

    @property
    def enrollment_percentage(self) -> float:
        if not self.max_students:
            return 0.0
        return round(self.current_enrollments / self.max_students * 100, 2)
