"""
Serializer helpers shared by tenant-scoped collections.
"""

from ...models import Tenant


class TenantDefaultMixin:
    """
    Fills ``tenant`` from the request on create.

    Records flagged ``is_global`` never get a tenant. The view passes the
    caller's tenant through the serializer context as ``tenant_id``.
    """

    def apply_tenant_default(self, attrs):
        if self.instance is not None:
            return attrs
        if attrs.get('is_global'):
            attrs['tenant'] = None
        elif not attrs.get('tenant'):
            tenant_id = self.context.get('tenant_id')
            if tenant_id:
                attrs['tenant'] = Tenant.objects.filter(id=tenant_id).first()
        return attrs

    def validate(self, attrs):
        attrs = super().validate(attrs)
        return self.apply_tenant_default(attrs)
