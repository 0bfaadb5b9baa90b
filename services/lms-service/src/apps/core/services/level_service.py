"""
Level Service

Level definitions per tenant, threshold validation and level-up
notifications.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from django.db.models import Max, Q

from ..events import publish_level_reached
from ..exceptions import DuplicateLevel, InvalidLevelThreshold
from ..models import Level, Notification, Progress, User
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


class LevelService:
    """Service for levels and level progression."""

    @staticmethod
    def visible_levels(tenant_id: Optional[UUID]):
        """Levels of a tenant plus the global ones, lowest first."""
        return Level.objects.filter(
            Q(tenant_id=tenant_id) | Q(is_global=True)
        ).order_by('level', 'points_required')

    @staticmethod
    def validate_level(
        level: int,
        points_required: int,
        tenant_id: Optional[UUID],
        instance: Optional[Level] = None,
    ) -> None:
        """
        Check the uniqueness and ordering rules for a level.

        Args:
            level: Level number
            points_required: Points threshold
            tenant_id: Owning tenant (None for global levels)
            instance: The level being updated, None on create

        Raises:
            DuplicateLevel: If the level number exists for the tenant or globally
            InvalidLevelThreshold: If the previous level needs as many points or more
        """
        same_scope = Q(tenant_id=tenant_id) | Q(is_global=True)

        if instance is None:
            if Level.objects.filter(same_scope, level=level).exists():
                raise DuplicateLevel(f"Level {level} already exists for this tenant")

        if level > 1:
            previous = Level.objects.filter(same_scope, level=level - 1)
            if instance is not None:
                previous = previous.exclude(pk=instance.pk)
            previous = previous.first()
            if previous is not None and previous.points_required >= points_required:
                raise InvalidLevelThreshold()

    @staticmethod
    def get_level_for_points(total_points: int, tenant_id: Optional[UUID]) -> Dict[str, Any]:
        """
        Resolve the current and next level for a points total.

        Returns:
            Dict with ``current`` and ``next`` levels (either may be None)
        """
        current = None
        upcoming = None
        for level in LevelService.visible_levels(tenant_id):
            if level.points_required <= total_points:
                current = level
            elif upcoming is None:
                upcoming = level
        return {'current': current, 'next': upcoming}

    @staticmethod
    def get_user_level(student: User) -> Dict[str, Any]:
        """
        Get the level a student has reached.

        The student's score is the highest ``total_points`` across their
        progress records.
        """
        total_points = Progress.objects.filter(student=student).aggregate(
            total=Max('total_points')
        )['total'] or 0

        levels = LevelService.get_level_for_points(total_points, student.tenant_id)
        current = levels['current']
        upcoming = levels['next']

        return {
            'total_points': total_points,
            'current_level': current,
            'next_level': upcoming,
            'points_to_next': (upcoming.points_required - total_points) if upcoming else None,
        }

    @staticmethod
    def check_level_up(student: User, previous_total: int, new_total: int) -> List[Level]:
        """
        Notify a student for every level crossed between two totals.

        Returns:
            The levels newly reached
        """
        if new_total <= previous_total:
            return []

        reached = list(
            LevelService.visible_levels(student.tenant_id).filter(
                points_required__gt=previous_total,
                points_required__lte=new_total,
            )
        )
        for level in reached:
            LevelService._notify(student.id, level)
        return reached

    @staticmethod
    def notify_eligible_students(level: Level) -> int:
        """
        Notify every student whose points already meet a level's threshold.

        Used after a level is created or changed.
        """
        scope = Q(is_global=True)
        if level.tenant_id:
            scope |= Q(student__tenant_id=level.tenant_id)
        elif level.is_global:
            scope = Q()

        student_ids = Progress.objects.filter(
            scope,
            total_points__gte=level.points_required,
        ).values_list('student_id', flat=True).distinct()

        count = 0
        for student_id in student_ids:
            LevelService._notify(student_id, level)
            count += 1

        logger.info(
            f"Level {level.level} eligibility sweep notified {count} students",
            extra={'level_id': str(level.id), 'tenant_id': str(level.tenant_id)}
        )
        return count

    @staticmethod
    def _notify(student_id: UUID, level: Level) -> None:
        NotificationService.create_notification(
            student_id,
            Notification.Type.LEVEL_UP,
            {
                'levelId': str(level.id),
                'level': level.level,
                'name': level.name,
                'pointsRequired': level.points_required,
            }
        )
        publish_level_reached(level.id, student_id, level.level)
