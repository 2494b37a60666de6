# Shared Common Library for the Flight Academy backend
# This package contains the error hierarchy, authorization policy,
# pagination, response envelope and middleware used by the services.

__version__ = "1.0.0"

from .exceptions import (
    BaseAPIException,
    ValidationException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    ConflictException,
    InternalServerException,
)

from .permissions import (
    Roles,
    require_role,
    require_owner_or_admin,
)

from .responses import (
    success_response,
    created_response,
)

__all__ = [
    # Version
    '__version__',

    # Exceptions
    'BaseAPIException',
    'ValidationException',
    'UnauthorizedException',
    'ForbiddenException',
    'NotFoundException',
    'ConflictException',
    'InternalServerException',

    # Authorization
    'Roles',
    'require_role',
    'require_owner_or_admin',

    # Responses
    'success_response',
    'created_response',
]
