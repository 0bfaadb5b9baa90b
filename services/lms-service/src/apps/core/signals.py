# services/lms-service/src/apps/core/signals.py
"""
Model signal handlers.

Follow-up work that must happen whenever a record is created or changed,
no matter which code path saved it.
"""

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Enrollment, Level, Points, User
from .services import EnrollmentService, LevelService, PointsService, UserService

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Enrollment)
def enrollment_created(sender, instance, created, **kwargs):
    if created:
        EnrollmentService.on_enrollment_created(instance)


@receiver(post_save, sender=Points)
def points_created(sender, instance, created, **kwargs):
    if created:
        PointsService.apply_to_progress(instance)


@receiver(post_save, sender=Level)
def level_saved(sender, instance, created, **kwargs):
    LevelService.notify_eligible_students(instance)


@receiver(post_save, sender=User)
def user_created(sender, instance, created, **kwargs):
    if created and instance.role == User.Role.STUDENT:
        UserService.get_or_create_settings(instance)
