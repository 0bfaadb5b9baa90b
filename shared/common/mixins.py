# shared/common/mixins.py
"""
Reusable Mixins for Models and Views
"""

import uuid
import logging
from django.db import models
from typing import Optional

logger = logging.getLogger(__name__)


# =============================================================================
# MODEL MIXINS
# =============================================================================

class UUIDPrimaryKeyMixin(models.Model):
    """
    Mixin that provides UUID as primary key instead of auto-increment integer.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record"
    )

    class Meta:
        abstract = True


class TimestampMixin(models.Model):
    """
    Mixin that provides created_at and updated_at timestamp fields.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="When this record was created"
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When this record was last updated"
    )

    class Meta:
        abstract = True


class BaseModel(UUIDPrimaryKeyMixin, TimestampMixin):
    """UUID primary key plus timestamps."""

    class Meta:
        abstract = True


# =============================================================================
# VIEW MIXINS
# =============================================================================

class TenantContextMixin:
    """
    Resolves the tenant for the current request.

    The token claim wins; admins (who may have no tenant) can target a
    tenant with the ``X-Tenant-ID`` header.
    """

    def get_tenant_id(self) -> Optional[str]:
        tenant_id = getattr(self.request.user, 'tenant_id', None)
        if tenant_id:
            return str(tenant_id)
        return self.request.headers.get('X-Tenant-ID') or getattr(
            self.request, 'tenant_id', None
        )


class ActionLogMixin:
    """
    Mixin that logs write actions performed on resources.
    """

    def perform_create(self, serializer):
        instance = serializer.save()
        self.log_action('create', instance)

    def perform_update(self, serializer):
        instance = serializer.save()
        self.log_action('update', instance)

    def perform_destroy(self, instance):
        self.log_action('delete', instance)
        instance.delete()

    def log_action(self, action: str, instance):
        logger.info(
            f"Action: {action} on {instance.__class__.__name__}",
            extra={
                'action': action,
                'model': instance.__class__.__name__,
                'instance_id': str(instance.pk),
                'user_id': str(getattr(self.request.user, 'id', None)),
            }
        )
