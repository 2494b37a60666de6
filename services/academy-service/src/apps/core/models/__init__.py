"""
Academy Service Models

This module exports all models for the Academy Service:
- Accounts (User)
- Catalog (Course)
- Enrollments (Enrollment, PaymentInstallment, EnrollmentNote)
"""

from .user import User
from .course import Course
from .enrollment import Enrollment, PaymentInstallment, EnrollmentNote

__all__ = [
    'User',
    'Course',
    'Enrollment',
    'PaymentInstallment',
    'EnrollmentNote',
]
