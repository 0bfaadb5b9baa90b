"""
Streak Service

Consecutive-day activity tracking with milestone bonuses.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from django.conf import settings
from django.db import transaction

from shared.common.utils import end_of_day, utc_now

from ..models import Notification, Points, Streak, User
from .notification_service import NotificationService
from .points_service import PointsService

logger = logging.getLogger(__name__)


class StreakService:
    """Service for activity streaks."""

    @staticmethod
    @transaction.atomic
    def record_activity(
        student: User,
        streak_type: str,
        activity: str,
        now: Optional[datetime] = None,
    ) -> Streak:
        """
        Record one activity against a streak.

        Another activity on the same calendar day only adds a history
        entry. Activity on the day after the last one extends the streak;
        any longer gap restarts it at 1.

        Args:
            student: The student
            streak_type: One of ``Streak.Type``
            activity: Short label stored in the history
            now: Override for the current time

        Returns:
            The updated streak
        """
        now = now or utc_now()
        streak, _ = Streak.objects.select_for_update().get_or_create(
            student=student,
            type=streak_type,
        )

        today = now.date()
        last_day = streak.last_activity.date() if streak.last_activity else None

        extended = True
        if last_day == today:
            extended = False
        elif last_day == today - timedelta(days=1):
            streak.current_streak += 1
        else:
            streak.current_streak = 1

        bonus = 0
        milestones = settings.LMS_SETTINGS['STREAK_MILESTONES']
        if extended and streak.current_streak in milestones:
            bonus = settings.LMS_SETTINGS['STREAK_BONUS_POINTS']

        streak.last_activity = now
        streak.next_required = end_of_day(now + timedelta(days=1))
        streak.history = list(streak.history or []) + [{
            'date': now.isoformat(),
            'activity': activity,
            'points': bonus,
        }]
        streak.save()

        if bonus:
            StreakService._reward_milestone(student, streak, bonus)

        return streak

    @staticmethod
    def _reward_milestone(student: User, streak: Streak, bonus: int) -> None:
        logger.info(
            f"Streak milestone: {streak.current_streak} days",
            extra={'student_id': str(student.id), 'streak_type': streak.type}
        )
        PointsService.award_points(
            student,
            Points.Type.STREAK_BONUS,
            bonus,
            source_streak=streak,
            metadata={'days': streak.current_streak, 'streakType': streak.type},
        )
        NotificationService.create_notification(
            student.id,
            Notification.Type.STREAK_MILESTONE,
            {
                'streakId': str(streak.id),
                'streakType': streak.type,
                'days': streak.current_streak,
                'points': bonus,
            }
        )
