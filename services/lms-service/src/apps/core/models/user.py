# services/lms-service/src/apps/core/models/user.py
"""
User and StudentSettings Models

Users carry one role and belong to one tenant (admins may have none).
Passwords are stored with Django's hashers; authentication itself is
JWT based and handled by ``AuthService``.
"""

from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from django.utils import timezone

from shared.common.mixins import BaseModel


def default_email_notifications():
    return {
        'assignments': True,
        'course_updates': True,
        'achievements': True,
    }


class User(BaseModel):
    """
    An LMS account: admin, instructor or student.
    """

    class Role(models.TextChoices):
        ADMIN = 'admin', 'Admin'
        INSTRUCTOR = 'instructor', 'Instructor'
        STUDENT = 'student', 'Student'

    email = models.EmailField(max_length=255, db_index=True)
    name = models.CharField(max_length=255)
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.STUDENT,
        db_index=True
    )
    tenant = models.ForeignKey(
        'core.Tenant',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='users'
    )
    avatar = models.ForeignKey(
        'core.Media',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )

    password = models.CharField(max_length=128, blank=True, default='')
    failed_login_attempts = models.PositiveIntegerField(default=0)
    locked_until = models.DateTimeField(null=True, blank=True)
    last_login_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'users'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'email'],
                name='unique_email_per_tenant'
            ),
        ]

    def __str__(self):
        return f"{self.name} <{self.email}>"

    @property
    def is_locked(self) -> bool:
        return bool(self.locked_until and self.locked_until > timezone.now())

    def set_password(self, raw_password: str) -> None:
        self.password = make_password(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return bool(self.password) and check_password(raw_password, self.password)

    def record_login_success(self):
        """Reset the failure counter after a good login."""
        self.failed_login_attempts = 0
        self.locked_until = None
        self.last_login_at = timezone.now()
        self.save(update_fields=[
            'failed_login_attempts', 'locked_until', 'last_login_at', 'updated_at'
        ])

    def record_login_failure(self, max_attempts: int = 5, lock_duration: int = 10) -> bool:
        """Count a failed login, locking the account at ``max_attempts``."""
        self.failed_login_attempts += 1
        if self.failed_login_attempts >= max_attempts:
            self.locked_until = timezone.now() + timezone.timedelta(minutes=lock_duration)
        self.save(update_fields=['failed_login_attempts', 'locked_until', 'updated_at'])
        return self.is_locked


class StudentSettings(BaseModel):
    """
    Per-user preferences.
    """

    class Theme(models.TextChoices):
        LIGHT = 'light', 'Light'
        DARK = 'dark', 'Dark'
        SYSTEM = 'system', 'System'

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='settings'
    )
    theme = models.CharField(
        max_length=10,
        choices=Theme.choices,
        default=Theme.SYSTEM
    )
    email_notifications = models.JSONField(default=default_email_notifications)

    class Meta:
        db_table = 'student_settings'
        verbose_name_plural = 'student settings'

    def __str__(self):
        return f"Settings for {self.user_id}"

    def wants_email(self, kind: str) -> bool:
        return bool((self.email_notifications or {}).get(kind, True))
