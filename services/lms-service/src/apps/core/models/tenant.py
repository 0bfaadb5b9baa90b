# services/lms-service/src/apps/core/models/tenant.py
"""
Tenant and Media Models

A tenant is one school or organization on the platform. Most records
belong to a tenant; records flagged ``is_global`` are shared by all.
"""

from django.db import models

from shared.common.mixins import BaseModel
from shared.common.utils import slugify_words


class Tenant(BaseModel):
    """
    An organization using the LMS.
    """

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        SUSPENDED = 'suspended', 'Suspended'
        ARCHIVED = 'archived', 'Archived'

    class Theme(models.TextChoices):
        LIGHT = 'light', 'Light'
        DARK = 'dark', 'Dark'
        SYSTEM = 'system', 'System'

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    domain = models.CharField(max_length=255, unique=True, null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True
    )
    theme = models.CharField(
        max_length=10,
        choices=Theme.choices,
        default=Theme.SYSTEM
    )
    logo = models.ForeignKey(
        'core.Media',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )

    class Meta:
        db_table = 'tenants'
        ordering = ['name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug and self.name:
            self.slug = slugify_words(self.name)
        if not self.domain:
            self.domain = None
        super().save(*args, **kwargs)


class Media(BaseModel):
    """
    An uploaded file (images, PDFs) owned by a tenant or shared globally.
    """

    file = models.FileField(upload_to='media/%Y/%m/')
    alt = models.CharField(max_length=255, blank=True, default='')
    mime_type = models.CharField(max_length=100, blank=True, default='')
    filesize = models.PositiveIntegerField(default=0)

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='media'
    )
    is_global = models.BooleanField(default=False)

    class Meta:
        db_table = 'media'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['tenant', 'is_global']),
        ]

    def __str__(self):
        return self.alt or self.file.name

    def save(self, *args, **kwargs):
        if self.is_global:
            self.tenant = None
        if self.file and not self.filesize:
            self.filesize = getattr(self.file, 'size', 0) or 0
        super().save(*args, **kwargs)
