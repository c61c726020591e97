from functools import wraps
from typing import Any, Dict, Optional

from flask import current_app, request
from firebase_admin import auth as firebase_auth

from ..utils.errors import AuthenticationError


class AuthMiddleware:
    """Resolves the caller's identity for API views.

    Production requests carry a Firebase ID token (``Authorization: Bearer``).
    In DEV_MODE the ``X-User-Id`` / ``X-User-Email`` headers are trusted.
    """

    @staticmethod
    def _bearer_token() -> Optional[str]:
        auth_header = request.headers.get('Authorization')
        if not auth_header:
            return None
        parts = auth_header.split(" ")
        if len(parts) != 2 or parts[0].lower() != 'bearer' or not parts[1]:
            raise AuthenticationError('Invalid token format')
        return parts[1]

    @staticmethod
    def resolve_identity() -> Dict[str, Any]:
        token = AuthMiddleware._bearer_token()
        if token:
            try:
                decoded_token = firebase_auth.verify_id_token(token)
            except (ValueError, firebase_auth.InvalidIdTokenError,
                    firebase_auth.ExpiredIdTokenError, firebase_auth.RevokedIdTokenError,
                    firebase_auth.CertificateFetchError):
                raise AuthenticationError('Invalid token')
            return {'id': decoded_token['uid'], 'email': decoded_token.get('email', '')}

        if current_app.config.get('DEV_MODE'):
            user_id = request.headers.get('X-User-Id', '').strip()
            if user_id:
                return {'id': user_id, 'email': request.headers.get('X-User-Email', '').strip()}

        raise AuthenticationError('Token is missing')

    @staticmethod
    def verify_token(f):
        """Decorator for async views that require a signed-in user"""
        @wraps(f)
        async def decorated_function(*args, **kwargs):
            request.current_user = AuthMiddleware.resolve_identity()
            return await f(*args, **kwargs)

        return decorated_function

    @staticmethod
    def get_current_user() -> Optional[Dict[str, Any]]:
        """Get current user from request"""
        return getattr(request, 'current_user', None)
