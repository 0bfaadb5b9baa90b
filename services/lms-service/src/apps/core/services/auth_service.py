"""
Authentication Service

Password login with lockout protection and JWT token issuance.
"""

import logging
from typing import Dict, Optional

import jwt
from django.conf import settings

from shared.common.authentication import JWTTokenGenerator
from shared.common.permissions import Roles

from ..exceptions import AccountLocked, InvalidCredentials, InvalidToken
from ..models import Streak, User
from ..tasks import evaluate_achievements
from .streak_service import StreakService

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service.

    Features:
    - Email and password login, optionally scoped to a tenant slug
    - Account lockout after repeated failures
    - Access and refresh token issuance
    """

    def __init__(self):
        lms_settings = settings.LMS_SETTINGS
        self.MAX_LOGIN_ATTEMPTS = lms_settings['MAX_LOGIN_ATTEMPTS']
        self.LOCKOUT_DURATION_MINUTES = lms_settings['LOCKOUT_DURATION_MINUTES']

    # ==================== LOGIN ====================

    def login(self, email: str, password: str, tenant_slug: Optional[str] = None) -> Dict:
        """
        Authenticate a user with email and password.

        Args:
            email: User's email address
            password: User's password
            tenant_slug: Tenant to log in to, when the email exists in several

        Returns:
            Dict with tokens and user info

        Raises:
            InvalidCredentials: If the credentials are wrong
            AccountLocked: If the account is locked
        """
        users = User.objects.filter(email__iexact=email).select_related('tenant')
        if tenant_slug:
            users = users.filter(tenant__slug=tenant_slug)
        user = users.order_by('created_at').first()

        if user is None:
            logger.warning(f"Login attempt for non-existent email: {email}")
            raise InvalidCredentials()

        if user.is_locked:
            raise AccountLocked(user.locked_until)

        if not user.check_password(password):
            is_locked = user.record_login_failure(
                max_attempts=self.MAX_LOGIN_ATTEMPTS,
                lock_duration=self.LOCKOUT_DURATION_MINUTES
            )
            logger.warning(
                "Failed login",
                extra={
                    'user_id': str(user.id),
                    'attempt_count': user.failed_login_attempts,
                    'locked': is_locked,
                }
            )
            if is_locked:
                raise AccountLocked(user.locked_until)

            remaining_attempts = self.MAX_LOGIN_ATTEMPTS - user.failed_login_attempts
            raise InvalidCredentials(
                f"Invalid credentials. {remaining_attempts} attempts remaining."
            )

        user.record_login_success()
        if user.role == Roles.STUDENT:
            StreakService.record_activity(user, Streak.Type.LOGIN, 'login')
            evaluate_achievements.delay(str(user.id), str(user.tenant_id) if user.tenant_id else None)

        logger.info("User logged in", extra={'user_id': str(user.id)})
        return self._token_response(user)

    # ==================== TOKEN MANAGEMENT ====================

    def refresh_tokens(self, refresh_token: str) -> Dict:
        """
        Issue a new token pair from a refresh token.

        Raises:
            InvalidToken: If the token is invalid, expired or not a refresh token
        """
        try:
            payload = JWTTokenGenerator.decode_token(refresh_token)
        except jwt.InvalidTokenError:
            raise InvalidToken()

        if payload.get('type') != 'refresh':
            raise InvalidToken("Invalid token type")

        user = User.objects.filter(id=payload.get('sub')).select_related('tenant').first()
        if user is None or user.is_locked:
            raise InvalidToken("User account is not active")

        return self._token_response(user)

    def _token_response(self, user: User) -> Dict:
        access_token = JWTTokenGenerator.generate_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role,
            tenant_id=user.tenant_id,
            extra_claims={'name': user.name},
        )
        refresh_token = JWTTokenGenerator.generate_refresh_token(user.id)

        return {
            'access_token': access_token,
            'refresh_token': refresh_token,
            'token_type': 'Bearer',
            'expires_in': int(settings.JWT_SETTINGS['ACCESS_TOKEN_LIFETIME'].total_seconds()),
            'user': self.user_payload(user),
        }

    @staticmethod
    def user_payload(user: User) -> Dict:
        return {
            'id': str(user.id),
            'email': user.email,
            'name': user.name,
            'role': user.role,
            'tenant_id': str(user.tenant_id) if user.tenant_id else None,
        }

    def me(self, token_user) -> User:
        """Load the stored user behind an authenticated token."""
        return User.objects.select_related('tenant').get(id=token_user.id)
