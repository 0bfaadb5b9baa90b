# services/lms-service/src/apps/core/api/views/base.py
"""
Shared view plumbing: tenant context and queryset scoping.
"""

from django.db.models import Q
from rest_framework import viewsets

from shared.common.exceptions import NotFoundException
from shared.common.mixins import ActionLogMixin, TenantContextMixin
from shared.common.permissions import is_admin, is_instructor

from ...models import User


class TenantScopedViewSet(TenantContextMixin, ActionLogMixin, viewsets.ModelViewSet):
    """
    ModelViewSet that knows the caller's tenant.

    ``tenant_id`` is passed to serializers so they can default the tenant
    of new records.
    """

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['tenant_id'] = self.get_tenant_id()
        return context

    def get_current_user(self) -> User:
        """The stored user behind the request token."""
        user = User.objects.filter(id=self.request.user.id).select_related('tenant').first()
        if user is None:
            raise NotFoundException("User not found")
        return user


def scope_to_tenant(queryset, request, tenant_field: str = 'tenant', global_field='is_global'):
    """
    Restrict a queryset to the caller's tenant.

    Admins see everything. Records whose ``global_field`` is true are
    visible to everyone; pass None to disable that.
    """
    if is_admin(request):
        return queryset
    condition = Q(**{f'{tenant_field}_id': getattr(request.user, 'tenant_id', None)})
    if global_field:
        condition |= Q(**{global_field: True})
    return queryset.filter(condition)


def scope_to_student(queryset, request, student_field: str = 'student'):
    """
    Admins see all rows, instructors the rows of their tenant's students,
    students only their own.
    """
    if is_admin(request):
        return queryset
    if is_instructor(request):
        return queryset.filter(**{f'{student_field}__tenant_id': request.user.tenant_id})
    return queryset.filter(**{f'{student_field}_id': request.user.id})
