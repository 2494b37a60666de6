"""
Academy Service business logic.
"""

from .auth_service import (
    AuthService,
    AuthConfig,
    InvalidCredentialsError,
    AccountLockedError,
    TokenInvalidError,
    TokenExpiredError,
    InvalidSessionError,
    DuplicateEmailError,
    UserTypeMismatchError,
)
from .user_service import UserService, UserNotFoundError
from .course_service import (
    CourseService,
    CourseNotFoundError,
    CourseHasActiveEnrollmentsError,
    parse_price,
)
from .enrollment_service import (
    EnrollmentService,
    EnrollmentNotFoundError,
    CourseUnavailableError,
    CourseFullError,
    DuplicateEnrollmentError,
    InvalidAmountError,
    InvalidStatusTransitionError,
    build_installment_schedule,
)
from .report_service import ReportService

__all__ = [
    # Auth
    'AuthService',
    'AuthConfig',
    'InvalidCredentialsError',
    'AccountLockedError',
    'TokenInvalidError',
    'TokenExpiredError',
    'InvalidSessionError',
    'DuplicateEmailError',
    'UserTypeMismatchError',

    # Users
    'UserService',
    'UserNotFoundError',

    # Catalog
    'CourseService',
    'CourseNotFoundError',
    'CourseHasActiveEnrollmentsError',
    'parse_price',

    # Enrollments
    'EnrollmentService',
    'EnrollmentNotFoundError',
    'CourseUnavailableError',
    'CourseFullError',
    'DuplicateEnrollmentError',
    'InvalidAmountError',
    'InvalidStatusTransitionError',
    'build_installment_schedule',

    # Reporting
    'ReportService',
]
