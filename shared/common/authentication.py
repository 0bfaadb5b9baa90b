# shared/common/authentication.py
"""
JWT Authentication for LMS API requests
"""

import uuid
import jwt
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Tuple
from django.conf import settings
from rest_framework import authentication, exceptions
from rest_framework.request import Request

logger = logging.getLogger(__name__)


class JWTAuthentication(authentication.BaseAuthentication):
    """
    JWT Token Authentication for API requests.
    Tokens carry the user id, role and tenant of the caller.
    """

    keyword = 'Bearer'

    def authenticate(self, request: Request) -> Optional[Tuple[Any, Dict]]:
        auth_header = authentication.get_authorization_header(request)

        if not auth_header:
            return None

        try:
            auth_parts = auth_header.decode('utf-8').split()
        except UnicodeDecodeError:
            raise exceptions.AuthenticationFailed('Invalid token header encoding')

        if len(auth_parts) != 2:
            raise exceptions.AuthenticationFailed('Invalid token header format')

        if auth_parts[0].lower() != self.keyword.lower():
            return None

        token = auth_parts[1]
        return self.authenticate_token(token)

    def authenticate_token(self, token: str) -> Tuple[Any, Dict]:
        """Validate and decode JWT token"""
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SETTINGS['VERIFYING_KEY'],
                algorithms=[settings.JWT_SETTINGS['ALGORITHM']],
                issuer=settings.JWT_SETTINGS['ISSUER'],
                options={
                    'require': ['exp', 'iat', 'sub', 'iss'],
                    'verify_exp': True,
                    'verify_iat': True,
                    'verify_iss': True,
                }
            )
        except jwt.ExpiredSignatureError:
            raise exceptions.AuthenticationFailed('Token has expired')
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid token: {e}")
            raise exceptions.AuthenticationFailed('Invalid token')

        if payload.get('type', 'access') != 'access':
            raise exceptions.AuthenticationFailed('Invalid token type')

        return (TokenUser(payload), payload)

    def authenticate_header(self, request: Request) -> str:
        return self.keyword


class TokenUser:
    """
    User object created from JWT token payload.

    Carries a single LMS role (admin, instructor or student) and the
    tenant the user belongs to. Admins may have no tenant.
    """

    def __init__(self, payload: Dict):
        self.payload = payload
        self.id = payload.get('sub')
        self.email = payload.get('email')
        self.name = payload.get('name')
        self.role = payload.get('role')
        self.tenant_id = payload.get('tenant_id')
        self.is_active = True
        self.is_authenticated = True
        self.is_anonymous = False

    def __str__(self) -> str:
        return f"TokenUser({self.email})"


class JWTTokenGenerator:
    """
    Generate JWT tokens for authentication.
    """

    @staticmethod
    def generate_access_token(
        user_id: str,
        email: str,
        role: str,
        tenant_id: Optional[str] = None,
        extra_claims: Dict = None
    ) -> str:
        """Generate an access token"""
        now = datetime.now(timezone.utc)

        payload = {
            'sub': str(user_id),
            'email': email,
            'role': role,
            'tenant_id': str(tenant_id) if tenant_id else None,
            'iat': now,
            'exp': now + settings.JWT_SETTINGS['ACCESS_TOKEN_LIFETIME'],
            'iss': settings.JWT_SETTINGS['ISSUER'],
            'type': 'access',
        }

        if extra_claims:
            payload.update(extra_claims)

        return jwt.encode(
            payload,
            settings.JWT_SETTINGS['SIGNING_KEY'],
            algorithm=settings.JWT_SETTINGS['ALGORITHM']
        )

    @staticmethod
    def generate_refresh_token(user_id: str, token_id: str = None) -> str:
        """Generate a refresh token"""
        now = datetime.now(timezone.utc)

        payload = {
            'sub': str(user_id),
            'jti': token_id or str(uuid.uuid4()),
            'iat': now,
            'exp': now + settings.JWT_SETTINGS['REFRESH_TOKEN_LIFETIME'],
            'iss': settings.JWT_SETTINGS['ISSUER'],
            'type': 'refresh',
        }

        return jwt.encode(
            payload,
            settings.JWT_SETTINGS['SIGNING_KEY'],
            algorithm=settings.JWT_SETTINGS['ALGORITHM']
        )

    @staticmethod
    def decode_token(token: str, verify_exp: bool = True) -> Dict:
        """Decode and verify a token"""
        return jwt.decode(
            token,
            settings.JWT_SETTINGS['VERIFYING_KEY'],
            algorithms=[settings.JWT_SETTINGS['ALGORITHM']],
            issuer=settings.JWT_SETTINGS['ISSUER'],
            options={'verify_exp': verify_exp}
        )
