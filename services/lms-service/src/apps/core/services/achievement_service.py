"""
Achievement Service

Evaluates achievement criteria against a student's progress and awards
achievements.

Criteria are evaluated per achievement type:
- course_progress: overall progress of the student's first progress record
- quiz_score: average quiz score of the first progress record
- streak: current length of the student's first streak
- custom: never satisfied automatically

``get_progress`` computes the numeric value behind a criterion for a
timeframe window (daily, weekly, monthly or all time).
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Set
from uuid import UUID

from django.db import transaction
from django.db.models import Q

from shared.common.exceptions import BadRequestException
from shared.common.utils import is_valid_uuid, timeframe_start

from ..constants import METRIC_COUNT, METRIC_DURATION, METRIC_SCORE, TIMEFRAME_ALL_TIME
from ..events import publish_achievement_unlocked
from ..exceptions import (
    AchievementNotFound,
    CustomProgressNotSupported,
    NotAuthenticated,
    UnknownAchievementType,
    UnsupportedMetric,
)
from ..models import (
    Achievement,
    Notification,
    Points,
    Progress,
    Streak,
    User,
    UserAchievement,
    UserBadge,
)
from .notification_service import NotificationService
from .points_service import PointsService

logger = logging.getLogger(__name__)

Type = Achievement.Type


def _mean(values: List[float]) -> float:
    if not values:
        return 0
    return sum(values) / len(values)


class AchievementService:
    """Service for achievement evaluation and awards."""

    # ==================== CRITERIA ====================

    @staticmethod
    def check_progress(user_id: UUID, achievement_id: UUID, tenant_id: Optional[UUID] = None) -> bool:
        """
        Check whether a user currently meets an achievement's criteria.

        Args:
            user_id: Student ID
            achievement_id: Achievement ID
            tenant_id: Tenant of the caller

        Returns:
            True if the threshold is met

        Raises:
            AchievementNotFound: If the achievement does not exist
        """
        achievement = Achievement.objects.filter(id=achievement_id).first()
        if achievement is None:
            raise AchievementNotFound()

        progress = Progress.objects.filter(student_id=user_id).order_by('created_at').first()
        if progress is None:
            return False

        threshold = achievement.criteria_threshold

        if achievement.type == Type.COURSE_PROGRESS:
            return progress.overall_progress >= threshold

        if achievement.type == Type.QUIZ_SCORE:
            return progress.average_quiz_score >= threshold

        if achievement.type == Type.STREAK:
            streak = Streak.objects.filter(student_id=user_id).order_by('created_at').first()
            current = streak.current_streak if streak else 0
            return current >= threshold

        return False

    @staticmethod
    def get_progress(
        user_id: UUID,
        achievement_type: str,
        metric: str,
        timeframe: str = TIMEFRAME_ALL_TIME,
    ) -> float:
        """
        Compute the numeric progress value for a criterion.

        Args:
            user_id: Student ID
            achievement_type: One of ``Achievement.Type``
            metric: count, score or duration
            timeframe: all_time, daily, weekly or monthly

        Returns:
            The metric value within the timeframe window

        Raises:
            UnsupportedMetric: If the metric does not apply to the type
            CustomProgressNotSupported: For custom achievements
            UnknownAchievementType: For any other type
        """
        start = timeframe_start(timeframe)

        if achievement_type in (Type.COURSE_PROGRESS, Type.ASSIGNMENT):
            records = list(Progress.objects.filter(student_id=user_id, completed_at__gt=start))
            if metric == METRIC_COUNT:
                return len(records)
            if metric == METRIC_SCORE:
                return _mean([record.overall_progress for record in records])
            label = 'course progress' if achievement_type == Type.COURSE_PROGRESS else 'assignment progress'
            raise UnsupportedMetric(f"Unsupported metric for {label}: {metric}")

        if achievement_type == Type.QUIZ_SCORE:
            attempts = []
            for record in Progress.objects.filter(student_id=user_id):
                attempts.extend(record.quiz_attempts_since(start))
            if metric == METRIC_COUNT:
                return len(attempts)
            if metric == METRIC_SCORE:
                return _mean([float(attempt.get('score') or 0) for attempt in attempts])
            raise UnsupportedMetric(f"Unsupported metric for quiz progress: {metric}")

        if achievement_type == Type.STREAK:
            streak = Streak.objects.filter(student_id=user_id).order_by('created_at').first()
            if metric == METRIC_COUNT:
                return streak.current_streak if streak else 0
            if metric == METRIC_DURATION:
                return streak.longest_streak if streak else 0
            raise UnsupportedMetric(f"Unsupported metric for streak progress: {metric}")

        if achievement_type == Type.DISCUSSION:
            progress = Progress.objects.filter(student_id=user_id).order_by('created_at').first()
            if metric == METRIC_COUNT:
                return len(progress.discussions_since(start)) if progress else 0
            raise UnsupportedMetric(f"Unsupported metric for discussion progress: {metric}")

        if achievement_type == Type.CUSTOM:
            raise CustomProgressNotSupported()

        raise UnknownAchievementType(f"Unknown achievement type: {achievement_type}")

    @staticmethod
    def check_prerequisites(user_id: UUID, achievement_id: UUID, tenant_id: Optional[UUID] = None) -> bool:
        """True once the user has unlocked any achievement."""
        return Points.objects.filter(
            student_id=user_id,
            type=Points.Type.ACHIEVEMENT_UNLOCK,
        ).exists()

    # ==================== AWARDS ====================

    @staticmethod
    def award_achievement(
        achievement_id: UUID,
        user_id: UUID,
        tenant_id: Optional[UUID],
        points: int,
        badge_id: Optional[UUID],
    ) -> None:
        """
        Award an achievement to a user.

        Creates the achievement_unlock points record, records the
        achievement and badge on the user, then notifies the user. A
        failed notification is logged and does not undo the award.
        """
        with transaction.atomic():
            student = User.objects.get(id=user_id)
            achievement = Achievement.objects.get(id=achievement_id)

            PointsService.award_points(
                student,
                Points.Type.ACHIEVEMENT_UNLOCK,
                points,
                source_achievement=achievement,
                metadata={'badgeId': str(badge_id) if badge_id else None},
            )
            UserAchievement.objects.get_or_create(user=student, achievement=achievement)
            if badge_id:
                UserBadge.objects.get_or_create(user=student, badge_id=badge_id)

        logger.info(
            f"Achievement {achievement_id} awarded",
            extra={'user_id': str(user_id), 'tenant_id': str(tenant_id), 'points': points}
        )
        publish_achievement_unlocked(achievement_id, user_id, points)

        try:
            NotificationService.create_notification(
                user_id,
                Notification.Type.ACHIEVEMENT_UNLOCKED,
                {
                    'achievementId': str(achievement_id),
                    'badgeId': str(badge_id) if badge_id else None,
                    'points': points,
                }
            )
        except Exception as e:
            logger.error(
                f"Failed to send achievement notification: {e}",
                extra={'user_id': str(user_id), 'achievement_id': str(achievement_id)}
            )

    @staticmethod
    def evaluate_achievement(user_id: UUID, achievement: Achievement, tenant_id: Optional[UUID]) -> bool:
        """
        Award an achievement if its criteria are met and it is not yet completed.

        Returns:
            True if the achievement was awarded now
        """
        if UserAchievement.objects.filter(user_id=user_id, achievement=achievement).exists():
            return False

        if not AchievementService.check_progress(user_id, achievement.id, tenant_id):
            return False

        AchievementService.award_achievement(
            achievement.id,
            user_id,
            tenant_id,
            achievement.points,
            achievement.badge_id,
        )
        return True

    @staticmethod
    def evaluate_all(user_id: UUID, tenant_id: Optional[UUID]) -> List[Achievement]:
        """
        Evaluate every open achievement visible to the user.

        Only achievements whose prerequisites are all completed are
        considered.

        Returns:
            The achievements awarded by this run
        """
        completed = AchievementService.completed_ids(user_id)
        candidates = (
            AchievementService.visible_to(tenant_id)
            .exclude(id__in=completed)
            .prefetch_related('prerequisites')
            .order_by('category', 'order')
        )

        awarded = []
        for achievement in candidates:
            if not AchievementService.prerequisites_met(achievement, completed):
                continue
            if AchievementService.evaluate_achievement(user_id, achievement, tenant_id):
                awarded.append(achievement)
                completed.add(achievement.id)

        if awarded:
            logger.info(
                f"Awarded {len(awarded)} achievements",
                extra={'user_id': str(user_id), 'tenant_id': str(tenant_id)}
            )
        return awarded

    @staticmethod
    def visible_to(tenant_id: Optional[UUID]):
        """Achievements of the tenant plus the global ones."""
        return Achievement.objects.filter(Q(tenant_id=tenant_id) | Q(is_global=True))

    @staticmethod
    def completed_ids(user_id: UUID) -> Set[UUID]:
        return set(
            UserAchievement.objects.filter(user_id=user_id).values_list('achievement_id', flat=True)
        )

    @staticmethod
    def prerequisites_met(achievement: Achievement, completed: Iterable[UUID]) -> bool:
        completed = set(completed)
        return all(prerequisite.id in completed for prerequisite in achievement.prerequisites.all())

    # ==================== ACTIONS ====================

    @staticmethod
    def _require_user(user) -> None:
        if (
            user is None
            or not getattr(user, 'is_authenticated', False)
            or not getattr(user, 'id', None)
            or not getattr(user, 'tenant_id', None)
        ):
            raise NotAuthenticated()

    @staticmethod
    def check_progress_action(user, achievement_id: Any) -> Dict[str, Any]:
        """
        Evaluate one achievement for the current user.

        Raises:
            NotAuthenticated: Without a user and tenant
            BadRequestException: If the id is not a UUID
            AchievementNotFound: If the achievement is neither the tenant's
                nor global
        """
        AchievementService._require_user(user)
        if not is_valid_uuid(achievement_id):
            raise BadRequestException("achievementId must be a valid UUID")

        achievement = AchievementService.visible_to(user.tenant_id).filter(id=achievement_id).first()
        if achievement is None:
            raise AchievementNotFound()

        awarded = AchievementService.evaluate_achievement(user.id, achievement, user.tenant_id)
        return {
            'achievement_id': str(achievement.id),
            'awarded': awarded,
            'completed': UserAchievement.objects.filter(
                user_id=user.id, achievement=achievement
            ).exists(),
        }

    @staticmethod
    def get_user_achievements(user):
        """The user's completed achievements, newest first."""
        AchievementService._require_user(user)
        return (
            UserAchievement.objects
            .filter(user_id=user.id)
            .select_related('achievement', 'achievement__badge')
            .order_by('-completed_at')
        )

    @staticmethod
    def get_available_achievements(user) -> List[Achievement]:
        """
        The tenant's own achievements, annotated for the user.

        Each achievement gets ``is_completed`` and ``prerequisites_met``
        attributes.
        """
        AchievementService._require_user(user)
        achievements = (
            Achievement.objects
            .filter(tenant_id=user.tenant_id, is_global=False)
            .select_related('badge')
            .prefetch_related('prerequisites')
            .order_by('category', 'order')
        )
        completed = AchievementService.completed_ids(user.id)

        result = []
        for achievement in achievements:
            achievement.is_completed = achievement.id in completed
            achievement.prerequisites_met = AchievementService.prerequisites_met(achievement, completed)
            result.append(achievement)
        return result

    @staticmethod
    def get_achievement_progress(user, achievement_id: Any) -> Dict[str, Any]:
        """
        Progress of the current user towards one of the tenant's achievements.

        Returns:
            Dict with the achievement, whether its criteria are met and,
            for non-custom types, the current metric value
        """
        AchievementService._require_user(user)
        achievement = None
        if is_valid_uuid(achievement_id):
            achievement = Achievement.objects.filter(
                id=achievement_id,
                tenant_id=user.tenant_id,
            ).select_related('badge').first()
        if achievement is None:
            raise AchievementNotFound()

        result = {
            'achievement': achievement,
            'progress': AchievementService.check_progress(user.id, achievement.id, user.tenant_id),
            'current_value': None,
        }

        if achievement.type != Type.CUSTOM:
            try:
                result['current_value'] = AchievementService.get_progress(
                    user.id,
                    achievement.type,
                    achievement.criteria_metric,
                    achievement.criteria_timeframe,
                )
            except UnsupportedMetric as e:
                logger.warning(
                    f"Cannot compute progress value: {e}",
                    extra={'achievement_id': str(achievement.id)}
                )

        return result
