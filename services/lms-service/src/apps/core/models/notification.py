# services/lms-service/src/apps/core/models/notification.py
"""
Notification Model

In-app notifications. Each row is also published to the user's realtime
channel when it is created.
"""

from django.db import models
from django.utils import timezone

from shared.common.mixins import BaseModel


class Notification(BaseModel):
    """
    A notification for one user.
    """

    class Type(models.TextChoices):
        ACHIEVEMENT_UNLOCKED = 'achievement_unlocked', 'Achievement Unlocked'
        BADGE_AWARDED = 'badge_awarded', 'Badge Awarded'
        LEVEL_UP = 'level_up', 'Level Up'
        POINTS_AWARDED = 'points_awarded', 'Points Awarded'
        STREAK_MILESTONE = 'streak_milestone', 'Streak Milestone'

    user = models.ForeignKey(
        'core.User',
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    type = models.CharField(max_length=30, choices=Type.choices, db_index=True)
    data = models.JSONField(default=dict, blank=True)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'read_at']),
        ]

    def __str__(self):
        return f"{self.type} for {self.user_id}"

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def mark_as_read(self):
        if self.read_at is None:
            self.read_at = timezone.now()
            self.save(update_fields=['read_at', 'updated_at'])
