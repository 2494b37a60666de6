"""
Academy Service Serializers
"""

from .auth import (
    RegisterSerializer,
    LoginSerializer,
    PasswordChangeSerializer,
)
from .user import (
    UserSerializer,
    UserListSerializer,
    UserUpdateSerializer,
    EnrolledCourseSerializer,
    StudentAdminSerializer,
    StudentStatusSerializer,
)
from .course import (
    CourseListSerializer,
    CourseDetailSerializer,
    CourseWriteSerializer,
)
from .enrollment import (
    PaymentInstallmentSerializer,
    EnrollmentNoteSerializer,
    EnrollmentListSerializer,
    EnrollmentDetailSerializer,
    EnrollmentCreateSerializer,
    ProgressUpdateSerializer,
    PaymentSerializer,
    StatusUpdateSerializer,
    NoteCreateSerializer,
)

__all__ = [
    # Auth
    'RegisterSerializer',
    'LoginSerializer',
    'PasswordChangeSerializer',
    # Users
    'UserSerializer',
    'UserListSerializer',
    'UserUpdateSerializer',
    'EnrolledCourseSerializer',
    'StudentAdminSerializer',
    'StudentStatusSerializer',
    # Courses
    'CourseListSerializer',
    'CourseDetailSerializer',
    'CourseWriteSerializer',
    # Enrollments
    'PaymentInstallmentSerializer',
    'EnrollmentNoteSerializer',
    'EnrollmentListSerializer',
    'EnrollmentDetailSerializer',
    'EnrollmentCreateSerializer',
    'ProgressUpdateSerializer',
    'PaymentSerializer',
    'StatusUpdateSerializer',
    'NoteCreateSerializer',
]
