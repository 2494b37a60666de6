# services/academy-service/src/apps/core/authentication.py
"""
DRF Authentication Backends

Custom authentication classes for Django REST Framework.
"""

import logging
from typing import Optional, Tuple

from rest_framework import authentication

from apps.core.models import User

logger = logging.getLogger(__name__)


class JWTAuthentication(authentication.BaseAuthentication):
    """
    Bearer token authentication.

    Validates the token from the Authorization header and resolves it to an
    active user. Expired, malformed or orphaned tokens fail with 401.

    Usage in ViewSet:
        authentication_classes = [JWTAuthentication]
    """

    keyword = 'Bearer'

    def authenticate(self, request) -> Optional[Tuple[User, dict]]:
        # Imported here: shared.common pulls in rest_framework.views, which loads this class
        from apps.core.services import AuthService, TokenInvalidError

        auth_header = authentication.get_authorization_header(request)

        if not auth_header:
            return None

        try:
            auth_parts = auth_header.decode('utf-8').split()
        except UnicodeDecodeError:
            raise TokenInvalidError('Invalid token header encoding.')

        if not auth_parts or auth_parts[0].lower() != self.keyword.lower():
            return None

        if len(auth_parts) != 2:
            raise TokenInvalidError('Invalid token header format.')

        service = AuthService()
        claims = service.verify_token(auth_parts[1])
        user = service.resolve_user(claims)

        return (user, claims)

    def authenticate_header(self, request) -> str:
        return self.keyword
