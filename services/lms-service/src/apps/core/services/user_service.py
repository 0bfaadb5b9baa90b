"""
User Service

User account management within tenants.
"""

import logging
from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError
from django.db import transaction

from shared.common.permissions import Roles

from ..exceptions import DuplicateEmail
from ..models import StudentSettings, User

logger = logging.getLogger(__name__)


class UserService:
    """Service for user accounts."""

    @staticmethod
    def check_email_available(email: str, tenant_id, exclude_id=None) -> None:
        users = User.objects.filter(email__iexact=email, tenant_id=tenant_id)
        if exclude_id:
            users = users.exclude(id=exclude_id)
        if users.exists():
            raise DuplicateEmail()

    @staticmethod
    @transaction.atomic
    def create_user(data: Dict[str, Any], password: Optional[str] = None) -> User:
        """
        Create a user.

        Raises:
            ValidationError: If a non-admin has no tenant
            DuplicateEmail: If the email is taken within the tenant
        """
        role = data.get('role') or Roles.STUDENT
        tenant = data.get('tenant')
        if tenant is None and role != Roles.ADMIN:
            raise ValidationError({'tenant': ['Tenant is required for non-admin users']})

        UserService.check_email_available(data['email'], getattr(tenant, 'id', None))

        user = User(**data)
        if password:
            user.set_password(password)
        user.save()

        logger.info(f"User created: {user.id}", extra={'role': user.role})
        return user

    @staticmethod
    @transaction.atomic
    def update_user(user: User, data: Dict[str, Any], password: Optional[str] = None) -> User:
        email = data.get('email', user.email)
        tenant = data.get('tenant', user.tenant)
        if email != user.email or tenant != user.tenant:
            UserService.check_email_available(email, getattr(tenant, 'id', None), exclude_id=user.id)

        for field, value in data.items():
            setattr(user, field, value)
        if password:
            user.set_password(password)
        user.save()
        return user

    @staticmethod
    def get_or_create_settings(user: User) -> StudentSettings:
        settings, _ = StudentSettings.objects.get_or_create(user=user)
        return settings
